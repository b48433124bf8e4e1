"""Tests for the profile and settings endpoints."""

PROFILE_URL = "/api/user/profile"
SETTINGS_URL = "/api/user/settings"


class TestProfile:
    def test_get_profile(self, client, make_user, auth_headers):
        user = make_user(full_name="Grace Hopper")
        resp = client.get(PROFILE_URL, headers=auth_headers(user))
        assert resp.status_code == 200, resp.text
        profile = resp.json()["user"]
        assert profile["email"] == user.email
        assert profile["fullName"] == "Grace Hopper"
        assert profile["bio"] is None
        assert profile["interests"] == []

    def test_update_profile(self, client, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user)
        resp = client.put(PROFILE_URL, json={
            "fullName": "Ada Lovelace",
            "bio": "Notes on the Analytical Engine",
            "location": "London",
            "website": "https://ada.example.com/notes",
            "interests": ["mathematics", "poetry"],
        }, headers=headers)
        assert resp.status_code == 200, resp.text
        assert resp.json()["message"] == "Profile updated successfully"

        profile = client.get(PROFILE_URL, headers=headers).json()["user"]
        assert profile["fullName"] == "Ada Lovelace"
        assert profile["location"] == "London"
        assert profile["website"] == "https://ada.example.com/notes"
        assert profile["interests"] == ["mathematics", "poetry"]

    def test_omitted_fields_are_cleared(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        client.put(PROFILE_URL, json={"fullName": "A", "bio": "Short bio", "website": ""}, headers=headers)
        client.put(PROFILE_URL, json={"fullName": "A"}, headers=headers)

        profile = client.get(PROFILE_URL, headers=headers).json()["user"]
        assert profile["bio"] is None
        assert profile["website"] is None

    def test_invalid_profile_rejected(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        assert client.put(PROFILE_URL, json={"fullName": ""}, headers=headers).status_code == 400
        assert client.put(
            PROFILE_URL, json={"fullName": "A", "website": "not a url"}, headers=headers
        ).status_code == 400
        assert client.put(
            PROFILE_URL, json={"fullName": "A", "interests": ["x"] * 21}, headers=headers
        ).status_code == 400

    def test_unauthenticated(self, client):
        assert client.get(PROFILE_URL).status_code == 401


class TestSettings:
    def test_defaults_for_new_user(self, client, make_user, auth_headers):
        resp = client.get(SETTINGS_URL, headers=auth_headers(make_user()))
        assert resp.status_code == 200
        prefs = resp.json()["preferences"]
        assert prefs["fontSize"] == 16
        assert prefs["theme"] == "system"
        assert prefs["readingSpeed"] == 250
        assert prefs["profileVisibility"] == "private"

    def test_updates_merge_over_stored_values(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        first = client.put(SETTINGS_URL, json={"theme": "dark", "fontSize": 18}, headers=headers)
        assert first.status_code == 200, first.text
        assert first.json()["message"] == "Settings updated successfully"

        second = client.put(SETTINGS_URL, json={"volume": 40}, headers=headers)
        prefs = second.json()["preferences"]
        assert (prefs["theme"], prefs["fontSize"], prefs["volume"]) == ("dark", 18, 40)
        assert prefs["weeklyDigest"] is True

        assert client.get(SETTINGS_URL, headers=headers).json()["preferences"] == prefs

    def test_unknown_or_invalid_settings_rejected(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        assert client.put(SETTINGS_URL, json={"favouriteColour": "blue"}, headers=headers).status_code == 400
        assert client.put(SETTINGS_URL, json={"theme": "neon"}, headers=headers).status_code == 400
        assert client.put(SETTINGS_URL, json={"volume": 120}, headers=headers).status_code == 400
