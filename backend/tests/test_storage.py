"""
Tests for DossierStorage (users, dossiers, notes) against in-memory SQLite.
"""
from handshakeiq.models.note import Note
from handshakeiq.schemas.dossier import DossierCreate, DossierUpdate, UserUpsert
from handshakeiq.schemas.report import GroundingSource
from handshakeiq.schemas.search import SocialLink


def _dossier(name="Jane Doe", **kwargs):
    return DossierCreate(person_name=name, **kwargs)


class TestUsers:
    def test_upsert_creates_then_updates(self, storage, user):
        assert storage.get_user(user.id).email == "sam@acme.com"

        updated = storage.upsert_user(UserUpsert(id=user.id, first_name="Samantha"))

        assert updated.first_name == "Samantha"
        assert updated.email == "sam@acme.com"
        assert updated.google_access_token == "google-token"

    def test_unknown_user(self, storage):
        assert storage.get_user("nobody") is None


class TestDossiers:
    """Dossier CRUD, always scoped to the calling user."""

    def test_save_and_get(self, storage, ctx):
        saved = storage.save_dossier(
            ctx,
            _dossier(
                person_title="VP Engineering",
                person_company="Acme Corp",
                intelligence_report={"summary": "s"},
                sources=[GroundingSource(uri="https://acme.com/team", title="Team")],
                social_media_links=[SocialLink(platform="linkedin", url="https://linkedin.com/in/janedoe")],
                search_query="Jane Doe Acme",
            ),
        )

        loaded = storage.get_dossier(ctx, saved.id)

        assert loaded.person_name == "Jane Doe"
        assert loaded.user_id == ctx.user_id
        assert loaded.sources == [{"uri": "https://acme.com/team", "title": "Team"}]
        assert loaded.social_media_links == [{"platform": "linkedin", "url": "https://linkedin.com/in/janedoe"}]
        assert loaded.intelligence_report == {"summary": "s"}

    def test_list_is_scoped_and_newest_first(self, storage, ctx, other_ctx):
        first = storage.save_dossier(ctx, _dossier("First"))
        second = storage.save_dossier(ctx, _dossier("Second"))
        storage.save_dossier(other_ctx, _dossier("Not mine"))

        assert [d.person_name for d in storage.list_dossiers(ctx)] == ["Second", "First"]

        storage.update_dossier(ctx, first.id, DossierUpdate(person_title="CTO"))

        assert [d.id for d in storage.list_dossiers(ctx)] == [first.id, second.id]

    def test_other_users_dossier_is_invisible(self, storage, ctx, other_ctx):
        theirs = storage.save_dossier(other_ctx, _dossier())

        assert storage.get_dossier(ctx, theirs.id) is None
        assert storage.update_dossier(ctx, theirs.id, DossierUpdate(person_title="x")) is None
        assert storage.delete_dossier(ctx, theirs.id) is False
        assert storage.get_dossier(other_ctx, theirs.id) is not None

    def test_update_only_touches_given_fields(self, storage, ctx):
        saved = storage.save_dossier(ctx, _dossier(person_title="VP", person_company="Acme"))

        updated = storage.update_dossier(ctx, saved.id, DossierUpdate(person_title="CTO"))

        assert updated.person_title == "CTO"
        assert updated.person_company == "Acme"

    def test_delete_removes_notes(self, storage, ctx, db_session):
        saved = storage.save_dossier(ctx, _dossier())
        storage.add_note(ctx, saved.id, "Met at conference")

        assert storage.delete_dossier(ctx, saved.id) is True
        assert storage.get_dossier(ctx, saved.id) is None
        assert db_session.query(Note).count() == 0


class TestNotes:
    """Notes belong to dossiers and inherit their ownership."""

    def test_add_list_update_delete(self, storage, ctx):
        dossier = storage.save_dossier(ctx, _dossier())
        note = storage.add_note(ctx, dossier.id, "Likes climbing")

        assert [n.content for n in storage.list_notes(ctx, dossier.id)] == ["Likes climbing"]

        updated = storage.update_note(ctx, note.id, "Likes bouldering")
        assert updated.content == "Likes bouldering"

        assert storage.delete_note(ctx, note.id) is True
        assert storage.list_notes(ctx, dossier.id) == []

    def test_notes_of_missing_dossier(self, storage, ctx):
        assert storage.add_note(ctx, "missing", "x") is None
        assert storage.list_notes(ctx, "missing") is None

    def test_other_users_notes_are_invisible(self, storage, ctx, other_ctx):
        theirs = storage.save_dossier(other_ctx, _dossier())
        note = storage.add_note(other_ctx, theirs.id, "private")

        assert storage.add_note(ctx, theirs.id, "sneaky") is None
        assert storage.list_notes(ctx, theirs.id) is None
        assert storage.update_note(ctx, note.id, "changed") is None
        assert storage.delete_note(ctx, note.id) is False
        assert storage.list_notes(other_ctx, theirs.id)[0].content == "private"
