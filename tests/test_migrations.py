"""
Alembic environment renders offline SQL against the registry metadata
"""
import io
from pathlib import Path

from alembic import command
from alembic.config import Config

MIGRATIONS = Path(__file__).resolve().parents[1] / "migrations"

EMPTY_REVISION = '''
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    pass


def downgrade():
    pass
'''


def test_offline_upgrade_renders_version_table(tmp_path):
    (tmp_path / "0001_baseline.py").write_text(EMPTY_REVISION)
    buffer = io.StringIO()
    config = Config(output_buffer=buffer)
    config.set_main_option("script_location", str(MIGRATIONS))
    config.set_main_option("version_locations", str(tmp_path))
    config.set_main_option("sqlalchemy.url", "sqlite://")

    command.upgrade(config, "head", sql=True)

    sql = buffer.getvalue()
    assert "CREATE TABLE alembic_version" in sql
    assert "INSERT INTO alembic_version (version_num) VALUES ('0001')" in sql
