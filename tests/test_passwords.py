from __future__ import annotations

import pytest

from leadflow.utils.passwords import hash_password, verify_password


class TestPasswords:
    def test_hash_is_salted_and_verifies(self) -> None:
        first = hash_password("s3cret", iterations=1000)
        second = hash_password("s3cret", iterations=1000)

        assert first != second
        assert first.startswith("pbkdf2_sha256$1000$")
        assert verify_password("s3cret", first)
        assert verify_password("s3cret", second)
        assert not verify_password("S3cret", first)

    @pytest.mark.parametrize(
        "encoded",
        ["", "plain", "pbkdf2_sha256$many$salt$abc", "md5$1000$salt$abc"],
    )
    def test_malformed_hashes_never_match(self, encoded: str) -> None:
        assert not verify_password("s3cret", encoded)
