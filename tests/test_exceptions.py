"""Tests for exception classes."""

import pytest

from truenas_updater.exceptions import (
    AuthenticationFailedError,
    ConnectivityError,
    EmptyResponseError,
    FetchFailedError,
    MissingCredentialError,
    SessionCheckError,
    SessionCheckUnavailableError,
    TrueNASError,
    UnreachableError,
    UpdaterError,
    UpgradeRejectedError,
)


class TestUpdaterError:
    """Test UpdaterError class."""

    def test_basic_initialization(self):
        error = UpdaterError("Something broke")
        assert str(error) == "Something broke"
        assert error.target is None

    def test_initialization_with_target(self):
        error = UpdaterError("Something broke", target="nextcloud")
        assert str(error) == "Something broke (nextcloud)"
        assert error.message == "Something broke"
        assert error.target == "nextcloud"


@pytest.mark.parametrize(
    "error_cls",
    [
        ConnectivityError,
        EmptyResponseError,
        UnreachableError,
        AuthenticationFailedError,
        FetchFailedError,
        UpgradeRejectedError,
    ],
)
def test_management_errors_share_base(error_cls):
    error = error_cls("failed", target="truenas.local")
    assert isinstance(error, TrueNASError)
    assert isinstance(error, UpdaterError)
    assert not isinstance(error, SessionCheckError)


@pytest.mark.parametrize(
    "error_cls", [MissingCredentialError, SessionCheckUnavailableError]
)
def test_session_errors_share_base(error_cls):
    with pytest.raises(SessionCheckError):
        raise error_cls("cannot verify")
