"""Authentication: password hashing, JWT issuance, role checks."""
