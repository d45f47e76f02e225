import variables as var
from functions import profiles
from functions.matching import get_or_create_conversation
from functions.meetings import request_meeting, submit_review
from functions.validations import ProfileForm


def _form(**overrides):
    data = dict(
        name="Anna",
        age=29,
        city="Kazan",
        phone="+79991234567",
        about_me="Love hiking and jazz.",
        values="Honesty above all.",
        family_goals="Two kids and a dog.",
        gender="female",
        looking_for="male",
        photos=["https://cdn/a.jpg", "https://cdn/b.jpg"],
    )
    data.update(overrides)
    return ProfileForm(**data)


def test_create_profile_reads_back(db):
    profiles.create_profile(db, "user-1", _form())

    stored = profiles.get_profile(db, "user-1")
    assert stored[var.col_name] == "Anna"
    assert stored[var.col_photos] == ["https://cdn/a.jpg", "https://cdn/b.jpg"]
    assert stored[var.col_photo_url] == "https://cdn/a.jpg"
    assert stored[var.col_smoking] is None


def test_update_profile_overwrites_fields(db):
    profiles.create_profile(db, "user-1", _form())

    profiles.update_profile(db, "user-1", _form(city="Samara", age=30, photos=["https://cdn/c.jpg"]))

    stored = profiles.get_profile(db, "user-1")
    assert stored[var.col_city] == "Samara"
    assert stored[var.col_age] == 30
    assert stored[var.col_photo_url] == "https://cdn/c.jpg"
    assert len(db.rows(var.table_profiles)) == 1


def test_set_photos(db):
    profiles.create_profile(db, "user-1", _form())

    profiles.set_photos(db, "user-1", ["https://cdn/b.jpg"])
    assert profiles.get_profile(db, "user-1")[var.col_photo_url] == "https://cdn/b.jpg"

    profiles.set_photos(db, "user-1", [])
    stored = profiles.get_profile(db, "user-1")
    assert stored[var.col_photos] == []
    assert stored[var.col_photo_url] is None


def test_get_profiles_ignores_blanks(db, man, woman):
    found = profiles.get_profiles(db, [man[var.col_id], woman[var.col_id], None, man[var.col_id]])

    assert {p[var.col_id] for p in found} == {man[var.col_id], woman[var.col_id]}
    assert profiles.get_profiles(db, []) == []


def test_profile_stats(db, man, woman, bot):
    met = get_or_create_conversation(db, man[var.col_id], woman[var.col_id])
    get_or_create_conversation(db, man[var.col_id], bot[var.col_id])
    request_meeting(db, met[var.col_id], man[var.col_id])
    request_meeting(db, met[var.col_id], woman[var.col_id])
    submit_review(db, woman[var.col_id], met[var.col_id], 5)

    assert profiles.profile_stats(db, man[var.col_id]) == {"matches": 2, "meetings": 1, "reviews": 1}
    assert profiles.profile_stats(db, bot[var.col_id]) == {"matches": 1, "meetings": 0, "reviews": 0}


def test_honesty_percent():
    assert profiles.honesty_percent(None) is None
    assert profiles.honesty_percent(3.5) == 70
    assert profiles.honesty_percent(5) == 100
