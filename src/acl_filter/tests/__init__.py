"""
Test package for acl_filter.

- models.py: application entities the ACL filter is exercised against
- fixtures.py: ACL store seeding helpers
"""
