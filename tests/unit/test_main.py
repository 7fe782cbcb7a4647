import base64
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import main
from gemini_failover.entities.dispatch_config import DispatchConfig
from gemini_failover.services.DispatchService.dispatch_errors import (
    CredentialsExhaustedError,
)


class TestLoadImageAttachment:
    def test_encodes_image_file(self, tmp_path: Path) -> None:
        image_path = tmp_path / "photo.png"
        image_path.write_bytes(b"png-bytes")

        attachment = main.load_image_attachment(image_path)

        assert attachment["mime_type"] == "image/png"
        assert base64.b64decode(attachment["data"]) == b"png-bytes"

    def test_rejects_non_image_file(self, tmp_path: Path) -> None:
        text_path = tmp_path / "notes.txt"
        text_path.write_text("hello")

        with pytest.raises(ValueError):
            main.load_image_attachment(text_path)


class TestMain:
    @pytest.mark.asyncio
    async def test_prints_reply(self, capsys) -> None:
        dispatcher = MagicMock()
        dispatcher.dispatch = AsyncMock(return_value="Hello!")
        config = DispatchConfig(credentials=["K1"])

        with patch.object(main, "bootstrap_dispatcher", return_value=(dispatcher, config)):
            exit_code = await main.main(["Hi"])

        assert exit_code == 0
        assert capsys.readouterr().out == "Hello!\n"
        dispatcher.dispatch.assert_awaited_once_with("Hi", [], [], config)

    @pytest.mark.asyncio
    async def test_dispatch_error_exits_with_failure(self) -> None:
        dispatcher = MagicMock()
        dispatcher.dispatch = AsyncMock(side_effect=CredentialsExhaustedError())

        with patch.object(
            main, "bootstrap_dispatcher", return_value=(dispatcher, DispatchConfig())
        ):
            exit_code = await main.main(["Hi"])

        assert exit_code == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            RuntimeError("OTEL_EXPORTER_OTLP_ENDPOINT environment variable is not set"),
            ValueError("Invalid environment: qa"),
        ],
    )
    async def test_bootstrap_error_exits_with_failure(self, error: Exception) -> None:
        with patch.object(main, "bootstrap_dispatcher", side_effect=error):
            exit_code = await main.main(["Hi", "--env", "qa"])

        assert exit_code == 1

    @pytest.mark.asyncio
    async def test_env_defaults_to_none_so_app_env_applies(self) -> None:
        dispatcher = MagicMock()
        dispatcher.dispatch = AsyncMock(return_value="Hello!")

        with patch.object(
            main, "bootstrap_dispatcher", return_value=(dispatcher, DispatchConfig())
        ) as mock_bootstrap:
            await main.main(["Hi"])

        mock_bootstrap.assert_called_once_with(env=None)
