"""Avatar and post attachment uploads backed by S3 or local disk."""
