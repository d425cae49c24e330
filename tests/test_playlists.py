import pytest

from musicbox.entities.library_entry import LibraryEntry
from musicbox.entities.playlist import Playlist, LIKED_SONGS_PLAYLIST_NAME
from musicbox.entities.playlist_entry import PlaylistEntry
from musicbox.exceptions import ReservedPlaylistError, ValidationError
from musicbox.likes import service as likes_service
from musicbox.playlists import service
from musicbox.playlists.models import CreatePlaylistRequest, EditPlaylistRequest
from musicbox.playlists.service import AddEntryResult, LibraryResult, RemoveEntryResult


def _create(db, user, name="Road Trip", is_public=False, description=None):
    return service.create_playlist(
        db, user.id, CreatePlaylistRequest(name=name, description=description, is_public=is_public)
    )


class TestCreateAndGet:
    def test_create_puts_playlist_in_creator_library(self, db, make_user):
        alice = make_user(db)
        playlist = _create(db, alice, description="Songs for the car")

        detail = service.get_playlist(db, playlist.id, alice.id)
        assert detail.name == "Road Trip"
        assert detail.description == "Songs for the car"
        assert detail.is_creator
        assert detail.is_in_library
        assert detail.songs == []
        assert db.query(LibraryEntry).filter_by(user_id=alice.id, playlist_id=playlist.id).count() == 1

    def test_reserved_name_is_rejected(self, db, make_user):
        alice = make_user(db)
        with pytest.raises(ValidationError):
            _create(db, alice, name="liked songs")
        assert db.query(Playlist).count() == 0

    def test_duplicate_names_are_allowed(self, db, make_user):
        alice = make_user(db)
        _create(db, alice, name="Mix")
        _create(db, alice, name="Mix")
        assert db.query(Playlist).filter_by(name="Mix").count() == 2

    def test_private_playlist_hidden_from_others(self, db, make_user):
        alice = make_user(db, "Alice")
        bob = make_user(db, "Bob")
        playlist = _create(db, alice)

        assert service.get_playlist(db, playlist.id, bob.id) is None

    def test_private_playlist_hidden_even_when_followed(self, db, make_user):
        alice = make_user(db, "Alice")
        bob = make_user(db, "Bob")
        playlist = _create(db, alice)
        service.add_to_library(db, playlist.id, bob.id)

        assert service.get_playlist(db, playlist.id, bob.id) is None

    def test_road_trip_becomes_visible_when_published(self, db, make_user):
        alice = make_user(db, "Alice")
        bob = make_user(db, "Bob")
        playlist = _create(db, alice, name="Road Trip", is_public=False)

        assert service.get_playlist(db, playlist.id, bob.id) is None

        service.edit_playlist(db, playlist.id, alice.id, EditPlaylistRequest(is_public=True))

        detail = service.get_playlist(db, playlist.id, bob.id)
        assert detail is not None
        assert detail.is_creator is False
        assert detail.creator.name == "Alice"


class TestEntries:
    def test_positions_grow_from_zero(self, db, make_user, make_song):
        alice = make_user(db)
        playlist = _create(db, alice)
        songs = [make_song(db, f"Track {i}") for i in range(3)]

        for song in songs:
            assert service.add_entry(db, playlist.id, song.id, alice.id) is AddEntryResult.SUCCESS

        detail = service.get_playlist(db, playlist.id, alice.id)
        assert [s.position for s in detail.songs] == [0, 1, 2]
        assert [s.id for s in detail.songs] == [s.id for s in songs]
        assert detail.song_count == 3

    def test_adding_twice_keeps_one_entry(self, db, make_user, make_song):
        alice = make_user(db)
        playlist = _create(db, alice)
        first = make_song(db, "First")
        second = make_song(db, "Second")
        service.add_entry(db, playlist.id, first.id, alice.id)
        service.add_entry(db, playlist.id, second.id, alice.id)

        assert service.add_entry(db, playlist.id, first.id, alice.id) is AddEntryResult.ALREADY_EXISTS

        entries = db.query(PlaylistEntry).filter_by(playlist_id=playlist.id, song_id=first.id).all()
        assert len(entries) == 1
        assert entries[0].position == 0

    def test_concurrent_add_resolves_to_already_exists(self, db, make_user, make_song, monkeypatch):
        alice = make_user(db)
        playlist = _create(db, alice)
        song = make_song(db)
        service.add_entry(db, playlist.id, song.id, alice.id)

        monkeypatch.setattr(service, "_entry_exists", lambda *args: False)

        assert service.add_entry(db, playlist.id, song.id, alice.id) is AddEntryResult.ALREADY_EXISTS
        assert db.query(PlaylistEntry).filter_by(playlist_id=playlist.id).count() == 1

    def test_removed_slot_is_not_filled(self, db, make_user, make_song):
        alice = make_user(db)
        playlist = _create(db, alice)
        a, b, c = (make_song(db, title) for title in ("A", "B", "C"))
        for song in (a, b):
            service.add_entry(db, playlist.id, song.id, alice.id)

        assert service.remove_entry(db, playlist.id, a.id, alice.id) is RemoveEntryResult.REMOVED
        service.add_entry(db, playlist.id, c.id, alice.id)

        detail = service.get_playlist(db, playlist.id, alice.id)
        assert [(s.title, s.position) for s in detail.songs] == [("B", 1), ("C", 2)]

    def test_unknown_song_or_playlist(self, db, make_user, make_song):
        import uuid

        alice = make_user(db)
        playlist = _create(db, alice)
        song = make_song(db)

        assert service.add_entry(db, playlist.id, uuid.uuid4(), alice.id) is AddEntryResult.NOT_FOUND
        assert service.add_entry(db, uuid.uuid4(), song.id, alice.id) is AddEntryResult.NOT_FOUND

    def test_library_member_may_add_but_not_remove(self, db, make_user, make_song):
        alice = make_user(db, "Alice")
        bob = make_user(db, "Bob")
        playlist = _create(db, alice, is_public=True)
        song = make_song(db)

        assert service.add_entry(db, playlist.id, song.id, bob.id) is AddEntryResult.NOT_FOUND

        service.add_to_library(db, playlist.id, bob.id)
        assert service.add_entry(db, playlist.id, song.id, bob.id) is AddEntryResult.SUCCESS
        assert service.remove_entry(db, playlist.id, song.id, bob.id) is RemoveEntryResult.NOT_FOUND
        assert service.remove_entry(db, playlist.id, song.id, alice.id) is RemoveEntryResult.REMOVED

    def test_liked_songs_rejects_direct_changes(self, db, make_user, make_song):
        alice = make_user(db)
        song = make_song(db)
        likes_service.like_song(db, alice.id, song.id)
        liked = service.get_or_create_liked_songs_playlist(db, alice.id)
        other = make_song(db, "Other")

        with pytest.raises(ReservedPlaylistError):
            service.add_entry(db, liked.id, other.id, alice.id)
        with pytest.raises(ReservedPlaylistError):
            service.remove_entry(db, liked.id, song.id, alice.id)
        with pytest.raises(ReservedPlaylistError):
            service.delete_playlist(db, liked.id, alice.id)
        with pytest.raises(ReservedPlaylistError):
            service.edit_playlist(db, liked.id, alice.id, EditPlaylistRequest(name="Faves"))

        assert likes_service.is_liked(db, alice.id, song.id)
        assert [s.id for s in service.get_playlist(db, liked.id, alice.id).songs] == [song.id]


class TestDeleteAndEdit:
    def test_delete_cascades_entries_and_library_rows(self, db, make_user, make_song):
        alice = make_user(db, "Alice")
        followers = [make_user(db, f"Follower{i}") for i in range(2)]
        playlist = _create(db, alice, is_public=True)
        for song in (make_song(db, f"Song {i}") for i in range(3)):
            service.add_entry(db, playlist.id, song.id, alice.id)
        for follower in followers:
            service.add_to_library(db, playlist.id, follower.id)
        playlist_id = playlist.id

        assert service.delete_playlist(db, playlist_id, alice.id)

        assert db.query(PlaylistEntry).filter_by(playlist_id=playlist_id).count() == 0
        assert db.query(LibraryEntry).filter_by(playlist_id=playlist_id).count() == 0
        for follower in followers:
            assert service.get_playlist(db, playlist_id, follower.id) is None

    def test_only_creator_deletes(self, db, make_user):
        alice = make_user(db, "Alice")
        bob = make_user(db, "Bob")
        playlist = _create(db, alice, is_public=True)

        assert service.delete_playlist(db, playlist.id, bob.id) is False
        assert db.query(Playlist).filter_by(id=playlist.id).count() == 1

    def test_edit_without_changes_keeps_updated_at(self, db, make_user):
        alice = make_user(db)
        playlist = _create(db, alice, name="Mix", description="Old")

        edited = service.edit_playlist(
            db, playlist.id, alice.id, EditPlaylistRequest(name="Mix", description="Old", is_public=False)
        )
        assert edited.updated_at is None

        edited = service.edit_playlist(db, playlist.id, alice.id, EditPlaylistRequest(description="New"))
        assert edited.description == "New"
        assert edited.name == "Mix"
        assert edited.updated_at is not None

    def test_edit_can_clear_description(self, db, make_user):
        alice = make_user(db)
        playlist = _create(db, alice, description="Old")

        edited = service.edit_playlist(db, playlist.id, alice.id, EditPlaylistRequest(description=None))
        assert edited.description is None

    def test_edit_by_other_user(self, db, make_user):
        alice = make_user(db, "Alice")
        bob = make_user(db, "Bob")
        playlist = _create(db, alice, is_public=True)

        assert service.edit_playlist(db, playlist.id, bob.id, EditPlaylistRequest(name="Mine")) is None


class TestLikedSongsPlaylist:
    def test_get_or_create_is_idempotent(self, db, make_user):
        alice = make_user(db)

        first = service.get_or_create_liked_songs_playlist(db, alice.id)
        second = service.get_or_create_liked_songs_playlist(db, alice.id)

        assert first.id == second.id
        assert db.query(Playlist).filter_by(creator_id=alice.id, name=LIKED_SONGS_PLAYLIST_NAME).count() == 1

    def test_concurrent_creation_converges(self, db, make_user, monkeypatch):
        alice = make_user(db)
        existing = service.get_or_create_liked_songs_playlist(db, alice.id)

        real_find = service._find_liked_songs_playlist
        calls = []

        def lose_first_lookup(session, user_id):
            calls.append(user_id)
            return None if len(calls) == 1 else real_find(session, user_id)

        monkeypatch.setattr(service, "_find_liked_songs_playlist", lose_first_lookup)

        playlist = service.get_or_create_liked_songs_playlist(db, alice.id)
        assert playlist.id == existing.id
        assert db.query(Playlist).filter_by(creator_id=alice.id, name=LIKED_SONGS_PLAYLIST_NAME).count() == 1


class TestLibrary:
    def test_add_is_idempotent(self, db, make_user):
        alice = make_user(db, "Alice")
        bob = make_user(db, "Bob")
        playlist = _create(db, alice, is_public=True)

        assert service.add_to_library(db, playlist.id, bob.id) is LibraryResult.ADDED
        assert service.add_to_library(db, playlist.id, bob.id) is LibraryResult.ALREADY_PRESENT
        assert db.query(LibraryEntry).filter_by(user_id=bob.id).count() == 1

    def test_remove(self, db, make_user):
        import uuid

        alice = make_user(db, "Alice")
        bob = make_user(db, "Bob")
        playlist = _create(db, alice, is_public=True)
        service.add_to_library(db, playlist.id, bob.id)

        assert service.remove_from_library(db, playlist.id, bob.id) is LibraryResult.REMOVED
        assert service.remove_from_library(db, playlist.id, bob.id) is LibraryResult.NOT_FOUND
        assert service.add_to_library(db, uuid.uuid4(), bob.id) is LibraryResult.NOT_FOUND


class TestListings:
    def test_user_list_starts_with_liked_songs(self, db, make_user):
        alice = make_user(db, "Alice")
        bob = make_user(db, "Bob")
        _create(db, alice, name="zebra")
        _create(db, alice, name="Apple")
        followed = _create(db, bob, name="Mango", is_public=True)
        hidden = _create(db, bob, name="Banana", is_public=False)
        service.add_to_library(db, followed.id, alice.id)
        service.add_to_library(db, hidden.id, alice.id)

        names = [p.name for p in service.list_user_playlists(db, alice.id)]
        assert names == [LIKED_SONGS_PLAYLIST_NAME, "Apple", "Mango", "zebra"]

    def test_user_list_search(self, db, make_user):
        alice = make_user(db)
        _create(db, alice, name="Summer Hits")
        _create(db, alice, name="Winter")

        assert [p.name for p in service.list_user_playlists(db, alice.id, "SUMMER")] == ["Summer Hits"]
        assert [p.name for p in service.list_user_playlists(db, alice.id, "liked")] == [LIKED_SONGS_PLAYLIST_NAME]
        assert [p.name for p in service.list_user_playlists(db, alice.id, "   ")][0] == LIKED_SONGS_PLAYLIST_NAME

    def test_search_treats_wildcards_literally(self, db, make_user):
        alice = make_user(db)
        _create(db, alice, name="100% Rock")
        _create(db, alice, name="1000 Rock")

        assert [p.name for p in service.list_user_playlists(db, alice.id, "0%")] == ["100% Rock"]

    def test_list_all_pagination(self, db, make_user):
        alice = make_user(db)
        for i in range(25):
            _create(db, alice, name=f"Playlist {i:02d}", is_public=True)

        first, total_pages = service.list_all_playlists(db, page=1, page_size=10, requester_id=alice.id)
        last, _ = service.list_all_playlists(db, page=3, page_size=10, requester_id=alice.id)

        assert total_pages == 3
        assert len(first) == 10
        assert first[0].name == "Playlist 00"
        assert len(last) == 5
        assert last[-1].name == "Playlist 24"

    def test_list_all_hides_private_and_liked_songs(self, db, make_user, make_song):
        alice = make_user(db, "Alice")
        bob = make_user(db, "Bob")
        _create(db, alice, name="Secret", is_public=False)
        _create(db, alice, name="Open", is_public=True)
        likes_service.like_song(db, alice.id, make_song(db).id)

        for_bob, _ = service.list_all_playlists(db, requester_id=bob.id)
        for_alice, _ = service.list_all_playlists(db, requester_id=alice.id)

        assert [p.name for p in for_bob] == ["Open"]
        assert [p.name for p in for_alice] == ["Open", "Secret"]

    def test_list_all_empty(self, db, make_user):
        alice = make_user(db)
        playlists, total_pages = service.list_all_playlists(db, requester_id=alice.id)
        assert playlists == []
        assert total_pages == 0
