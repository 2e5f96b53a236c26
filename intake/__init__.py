"""Client Intake: resumable multi-step intake drafts."""
