"""Leave requests: submission, listing, edits and admin decisions."""
