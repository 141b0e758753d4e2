from click.testing import CliRunner

from creator_program.cli import cli
from creator_program.db.models import AdminUser


def test_grant_admin_creates_directory_record(db):
    runner = CliRunner()

    result = runner.invoke(
        cli,
        [
            "grant-admin",
            "--email",
            "Owner@Example.com",
            "--name",
            "Olive",
            "--role",
            "owner",
            "--extra-role",
            "admin",
        ],
    )

    assert result.exit_code == 0, result.output
    admin = db.query(AdminUser).filter(AdminUser.email == "owner@example.com").one()
    assert admin.role == "owner"
    assert admin.roles == ["admin"]
    assert admin.display_name == "Olive"


def test_grant_admin_rejects_unknown_role(db):
    result = CliRunner().invoke(cli, ["grant-admin", "--email", "x@example.com", "--role", "root"])

    assert result.exit_code != 0
    assert db.query(AdminUser).count() == 0
