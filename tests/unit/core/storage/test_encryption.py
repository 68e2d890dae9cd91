"""Tests for the ProfileEncryptor (Fernet-based profile encryption)."""

from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from conftest import make_entry, make_profile
from sepsiscan.core.storage.encryption import EncryptionError, ProfileEncryptor


@pytest.fixture
def key() -> str:
    return Fernet.generate_key().decode()


@pytest.fixture
def encryptor(key: str) -> ProfileEncryptor:
    return ProfileEncryptor(key)


class TestProfileDocuments:
    def test_profile_document_survives(self, encryptor: ProfileEncryptor):
        document = make_profile(historical_data=[make_entry(symptoms="chills")]).to_dict()
        token = encryptor.encrypt(document)
        assert isinstance(token, str)
        assert "chills" not in token
        assert encryptor.decrypt(token) == document

    def test_non_ascii_text(self, encryptor: ProfileEncryptor):
        data = {"symptom_duration": "1–3 days", "note": "38°C"}
        assert encryptor.decrypt(encryptor.encrypt(data)) == data

    def test_null(self, encryptor: ProfileEncryptor):
        assert encryptor.encrypt(None) == ""
        assert encryptor.decrypt("") is None

    def test_unserializable_raises(self, encryptor: ProfileEncryptor):
        with pytest.raises(EncryptionError, match="Encryption failed"):
            encryptor.encrypt({"when": object()})


class TestProfileRoundTrip:
    def test_profile_survives(self, encryptor: ProfileEncryptor):
        profile = make_profile(historical_data=[make_entry(symptoms="wound redness")])
        token = encryptor.encrypt_profile(profile)
        assert "wound" not in token
        assert encryptor.decrypt_profile(token) == profile

    def test_non_profile_document_raises(self, encryptor: ProfileEncryptor):
        with pytest.raises(EncryptionError, match="no profile document"):
            encryptor.decrypt_profile(encryptor.encrypt([1, 2]))

    def test_profile_without_id_raises(self, encryptor: ProfileEncryptor):
        with pytest.raises(EncryptionError, match="malformed profile"):
            encryptor.decrypt_profile(encryptor.encrypt({"name": "Alex"}))


class TestKeyValidation:
    def test_empty_key_raises(self):
        with pytest.raises(EncryptionError, match="must not be empty"):
            ProfileEncryptor("")

    def test_whitespace_key_raises(self):
        with pytest.raises(EncryptionError, match="must not be empty"):
            ProfileEncryptor("   ")

    def test_invalid_key_raises(self):
        with pytest.raises(EncryptionError, match="Invalid encryption key"):
            ProfileEncryptor("not-a-valid-fernet-key")


class TestCorruptData:
    def test_wrong_key_cannot_decrypt(self, encryptor: ProfileEncryptor):
        token = encryptor.encrypt({"name": "Alex"})
        other = ProfileEncryptor(Fernet.generate_key().decode())
        with pytest.raises(EncryptionError, match="invalid token"):
            other.decrypt(token)

    def test_tampered_token_raises(self, encryptor: ProfileEncryptor):
        token = encryptor.encrypt({"data": 1})
        with pytest.raises(EncryptionError):
            encryptor.decrypt(token[:-5] + "XXXXX")

    def test_garbage_token_raises(self, encryptor: ProfileEncryptor):
        with pytest.raises(EncryptionError):
            encryptor.decrypt("not-a-valid-token")


class TestGenerateKey:
    def test_generated_key_works(self):
        key = ProfileEncryptor.generate_key()
        assert len(key) == 44
        enc = ProfileEncryptor(key)
        assert enc.decrypt(enc.encrypt({"ok": True})) == {"ok": True}

    def test_each_key_is_unique(self):
        assert len({ProfileEncryptor.generate_key() for _ in range(10)}) == 10
