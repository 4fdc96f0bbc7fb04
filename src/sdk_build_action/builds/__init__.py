"""Build resolution, submission, polling and evaluation."""
