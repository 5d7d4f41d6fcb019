"""서버 실행 스크립트 테스트."""

from unittest.mock import patch

from storefront.config import settings
from storefront.server import main


class TestServerEntrypoint:
    """uvicorn 실행 인자 테스트."""

    def test_defaults_from_settings(self):
        """인자가 없으면 설정값으로 실행."""
        with patch("sys.argv", ["storefront-server"]), patch("storefront.server.uvicorn.run") as run:
            main()
        run.assert_called_once()
        assert run.call_args.args == ("storefront.main:app",)
        assert run.call_args.kwargs["host"] == settings.HOST
        assert run.call_args.kwargs["port"] == settings.PORT

    def test_cli_overrides(self):
        """--host, --port, --reload 인자 우선."""
        argv = ["storefront-server", "--host", "127.0.0.1", "--port", "9000", "--reload"]
        with patch("sys.argv", argv), patch("storefront.server.uvicorn.run") as run:
            main()
        assert run.call_args.kwargs["host"] == "127.0.0.1"
        assert run.call_args.kwargs["port"] == 9000
        assert run.call_args.kwargs["reload"] is True
