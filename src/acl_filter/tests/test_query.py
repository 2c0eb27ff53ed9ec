"""
Direct grant reporting.
"""

from acl_filter.interface.acl import AclGrant
from acl_filter.interface.masks import MaskBuilder
from acl_filter.permissions.identities import class_type_of, user_identifier
from acl_filter.permissions.principal import Principal
from acl_filter.permissions.query import AclQuery
from acl_filter.tests.fixtures import grant, register_object
from acl_filter.tests.models import Document, SecretDocument, User


class TestAclQuery:

    def test_unknown_object(self, session, documents):
        assert AclQuery(session).query_acl("App-Entity-Document", 42) == []

    def test_object_without_entries(self, session, documents):
        register_object(session, documents["bob"])
        session.commit()
        assert AclQuery(session).query_acl(User, 2) == []

    def test_role_grant(self, session, documents):
        grants = AclQuery(session).query_acl(class_type_of(Document), 1)
        assert grants == [AclGrant(security_identifier="ROLE_VIEWER", is_username=False, mask=MaskBuilder.VIEW)]

    def test_username_grant(self, session, documents):
        (alice,) = AclQuery(session).query_acl(Document, "2")
        assert alice.security_identifier == user_identifier(Principal(username="alice"))
        assert alice.is_username is True
        assert alice.mask == MaskBuilder.EDIT

    def test_grants_in_entry_order(self, session, documents):
        grant(session, Document, 1, "ROLE_AUDITOR", MaskBuilder.VIEW | MaskBuilder.UNDELETE)
        session.commit()

        grants = AclQuery(session).query_acl(Document, 1)
        assert [(g.security_identifier, g.mask) for g in grants] == [
            ("ROLE_VIEWER", 1),
            ("ROLE_AUDITOR", 17),
        ]

    def test_class_is_not_inherited(self, session, documents):
        # the secret document is stored under its own class
        assert AclQuery(session).query_acl(Document, 3) == []
        assert len(AclQuery(session).query_acl(SecretDocument, 3)) == 1

    def test_roles_are_not_expanded(self, session, documents):
        grants = AclQuery(session).query_acl(SecretDocument, 3)
        assert [g.security_identifier for g in grants] == ["ROLE_ADMIN"]

    def test_field_entries(self, session, documents):
        grant(session, Document, 1, "ROLE_EDITOR", MaskBuilder.EDIT, field="title")
        session.commit()
        query = AclQuery(session)

        assert [g.security_identifier for g in query.query_acl(Document, 1, "title")] == ["ROLE_EDITOR"]
        assert [g.security_identifier for g in query.query_acl(Document, 1)] == ["ROLE_VIEWER"]
        assert query.query_acl(Document, 1, "owner") == []

    def test_class_wide_entries_are_not_reported(self, session, documents):
        grant(session, Document, None, "ROLE_EDITOR", MaskBuilder.VIEW)
        session.commit()
        assert [g.security_identifier for g in AclQuery(session).query_acl(Document, 1)] == ["ROLE_VIEWER"]
