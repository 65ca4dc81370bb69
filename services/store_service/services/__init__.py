"""Store Service transactional operations package."""
