"""Core request translation logic.

Module Structure:
    - toolkit/          : Identity Toolkit endpoints, dispatcher, signers and services
    - field_mapping.py  : public <-> wire property names, deletion list, update masks
      - validators.py     : syntactic predicates (uid, email, phone number, URL)

Modules are not auto-imported; import them explicitly:
    from identity_admin.core.field_mapping import to_wire, USER_RENAMES
    from identity_admin.core.toolkit.records import UserRecord
"""
