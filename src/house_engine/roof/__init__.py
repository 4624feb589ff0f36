"""Multi-plane roof region resolution and edit-consistency fixes."""
