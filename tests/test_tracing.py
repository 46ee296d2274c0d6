import os
from unittest.mock import MagicMock, patch

from swarm_verify.core.settings import AppSettings
from swarm_verify.observability import langfuse_tracing


def keyed_settings() -> AppSettings:
    return AppSettings(langfuse_public_key="pk-test", langfuse_secret_key="sk-test")


def test_tracing_disabled_without_keys():
    settings = AppSettings(langfuse_public_key="", langfuse_secret_key="")

    with patch.object(langfuse_tracing, "get_client") as get_client:
        assert not langfuse_tracing.initialize_langfuse_tracing(settings)

    get_client.assert_not_called()


def test_tracing_authenticates_with_keys():
    client = MagicMock()
    client.auth_check.return_value = True

    with patch.dict(os.environ, {}, clear=True), patch.object(
        langfuse_tracing, "get_client", return_value=client
    ):
        assert langfuse_tracing.initialize_langfuse_tracing(keyed_settings())
        assert os.environ["LANGFUSE_PUBLIC_KEY"] == "pk-test"

    client.auth_check.assert_called_once()


def test_failed_authentication_is_reported():
    client = MagicMock()
    client.auth_check.return_value = False

    with patch.dict(os.environ, {}, clear=True), patch.object(
        langfuse_tracing, "get_client", return_value=client
    ):
        assert not langfuse_tracing.initialize_langfuse_tracing(keyed_settings())


def test_tracing_failure_is_not_fatal():
    with patch.dict(os.environ, {}, clear=True), patch.object(
        langfuse_tracing, "get_client", side_effect=RuntimeError("no network")
    ):
        assert not langfuse_tracing.initialize_langfuse_tracing(keyed_settings())
