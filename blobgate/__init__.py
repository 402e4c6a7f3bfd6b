"""blobgate: role-based, prefix-scoped access gateway for a binary object store."""
