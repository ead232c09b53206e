"""initial schema

Revision ID: 0001
Revises:
Create Date: 2024-01-15 10:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "sources",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("base_url", sa.String(2048), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "networks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("source_id", sa.Integer(), sa.ForeignKey("sources.id", ondelete="CASCADE"), nullable=False),
        sa.Column("code", sa.String(8), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("start_time", sa.DateTime(), nullable=True),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("idx_networks_source_code", "networks", ["source_id", "code"], unique=True)
    op.create_index("idx_networks_code", "networks", ["code"])

    op.create_table(
        "stations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("network_id", sa.Integer(), sa.ForeignKey("networks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("code", sa.String(8), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False, server_default="0"),
        sa.Column("longitude", sa.Float(), nullable=False, server_default="0"),
        sa.Column("elevation", sa.Float(), nullable=False, server_default="0"),
        sa.Column("site_name", sa.Text(), nullable=False, server_default=""),
        sa.Column("start_time", sa.DateTime(), nullable=True),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("idx_stations_network_code", "stations", ["network_id", "code"], unique=True)

    op.create_table(
        "channels",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("station_id", sa.Integer(), sa.ForeignKey("stations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("location_code", sa.String(8), nullable=False, server_default=""),
        sa.Column("code", sa.String(8), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("elevation", sa.Float(), nullable=True),
        sa.Column("depth", sa.Float(), nullable=True),
        sa.Column("azimuth", sa.Float(), nullable=True),
        sa.Column("dip", sa.Float(), nullable=True),
        sa.Column("sensor_description", sa.Text(), nullable=False, server_default=""),
        sa.Column("scale", sa.Float(), nullable=True),
        sa.Column("scale_freq", sa.Float(), nullable=True),
        sa.Column("scale_units", sa.String(32), nullable=False, server_default=""),
        sa.Column("sample_rate", sa.Float(), nullable=True),
        sa.Column("start_time", sa.DateTime(), nullable=True),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "idx_channels_station_loc_code", "channels",
        ["station_id", "location_code", "code"], unique=True
    )

    op.create_table(
        "availability",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("channel_id", sa.Integer(), sa.ForeignKey("channels.id", ondelete="CASCADE"), nullable=False),
        sa.Column("earliest", sa.DateTime(), nullable=False),
        sa.Column("latest", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "idx_availability_channel_earliest", "availability",
        ["channel_id", "earliest"], unique=True
    )


def downgrade():
    op.drop_index("idx_availability_channel_earliest", table_name="availability")
    op.drop_table("availability")
    op.drop_index("idx_channels_station_loc_code", table_name="channels")
    op.drop_table("channels")
    op.drop_index("idx_stations_network_code", table_name="stations")
    op.drop_table("stations")
    op.drop_index("idx_networks_code", table_name="networks")
    op.drop_index("idx_networks_source_code", table_name="networks")
    op.drop_table("networks")
    op.drop_table("sources")
