"""Tests for clinicdesk CLI commands."""

from unittest.mock import patch

from typer.testing import CliRunner

from clinicdesk import __version__
from clinicdesk.cli import app
from clinicdesk.core.auth.backend import verify_password


runner = CliRunner()


class TestVersion:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestCatalogCommands:
    """Tests for clinicdesk roles / permissions."""

    def test_roles_lists_every_role(self) -> None:
        result = runner.invoke(app, ["roles"])

        assert result.exit_code == 0
        for role in ("admin", "doctor", "nurse", "receptionist", "accountant"):
            assert role in result.stdout

    def test_permissions_lists_every_tag(self) -> None:
        result = runner.invoke(app, ["permissions"])

        assert result.exit_code == 0
        assert "view_patients" in result.stdout
        assert "manage_database" in result.stdout


class TestCheckCommand:
    """Tests for clinicdesk check."""

    def test_granted(self) -> None:
        result = runner.invoke(
            app,
            ["check", "--role", "accountant", "--grant", "view_payroll", "-p", "view_payroll"],
        )

        assert result.exit_code == 0, result.stdout
        assert "granted" in result.stdout

    def test_denied_missing_permission(self) -> None:
        result = runner.invoke(
            app, ["check", "--role", "nurse", "--grant", "view_staff", "-p", "view_payroll"]
        )

        assert result.exit_code == 1
        assert "missing_permission" in result.stdout

    def test_admin_bypass(self) -> None:
        result = runner.invoke(app, ["check", "--role", "admin", "-p", "manage_database"])
        assert result.exit_code == 0

    def test_inactive_admin(self) -> None:
        result = runner.invoke(
            app, ["check", "--role", "admin", "--inactive", "-p", "view_patients"]
        )

        assert result.exit_code == 1
        assert "account_inactive" in result.stdout

    def test_anonymous(self) -> None:
        result = runner.invoke(app, ["check", "--anonymous"])

        assert result.exit_code == 1
        assert "authentication_required" in result.stdout

    def test_role_requirement(self) -> None:
        result = runner.invoke(
            app, ["check", "--role", "doctor", "--require-role", "nurse"]
        )

        assert result.exit_code == 1
        assert "missing_role" in result.stdout

    def test_any_of_list(self) -> None:
        result = runner.invoke(
            app,
            [
                "check",
                "--grant",
                "view_finance",
                "--require",
                "view_finance",
                "--require",
                "view_payroll",
            ],
        )
        assert result.exit_code == 0

    def test_all_of_list(self) -> None:
        result = runner.invoke(
            app,
            [
                "check",
                "--grant",
                "view_finance",
                "--require",
                "view_finance",
                "--require",
                "view_payroll",
                "--all",
            ],
        )

        assert result.exit_code == 1
        assert "missing_all_permissions" in result.stdout

    def test_unknown_grant_warns(self) -> None:
        result = runner.invoke(app, ["check", "--grant", "fly_helicopter"])

        assert result.exit_code == 0
        assert "fly_helicopter" in result.stdout


class TestHashPasswordCommand:
    def test_prints_verifiable_hash(self) -> None:
        result = runner.invoke(
            app, ["hash-password"], input="s3cure-pass\ns3cure-pass\n"
        )

        assert result.exit_code == 0
        hashed = result.stdout.strip().splitlines()[-1]
        assert verify_password("s3cure-pass", hashed)

    def test_rejects_short_password(self) -> None:
        result = runner.invoke(app, ["hash-password", "--password", "short"])
        assert result.exit_code == 1


class TestServeCommand:
    def test_runs_uvicorn_with_app_factory(self) -> None:
        with patch("uvicorn.run") as run:
            result = runner.invoke(app, ["serve", "--port", "9000"])

        assert result.exit_code == 0
        run.assert_called_once()
        assert run.call_args.args[0] == "clinicdesk.main:create_app"
        assert run.call_args.kwargs["factory"] is True
        assert run.call_args.kwargs["port"] == 9000
