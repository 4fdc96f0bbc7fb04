"""GitHub Actions runtime: context, step outputs and PR comments."""
