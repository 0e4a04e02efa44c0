"""Create truck_routes table

Revision ID: 001_truck_routes
Revises:
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_truck_routes'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ROUTE_STATUSES = ('pending_calculation', 'planned', 'active', 'completed')


def upgrade() -> None:
    op.create_table(
        'truck_routes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('origin', sa.Text(), nullable=False),
        sa.Column('destination', sa.Text(), nullable=False),
        sa.Column('origin_lat', sa.Float(), nullable=False),
        sa.Column('origin_lng', sa.Float(), nullable=False),
        sa.Column('destination_lat', sa.Float(), nullable=False),
        sa.Column('destination_lng', sa.Float(), nullable=False),
        sa.Column('distance_km', sa.Float(), nullable=True),
        sa.Column('total_miles', sa.Float(), nullable=True),
        sa.Column('estimated_duration_minutes', sa.Integer(), nullable=True),
        sa.Column('state_breakdown', sa.Text(), nullable=True),
        sa.Column('path', sa.Text(), nullable=True),
        sa.Column('coordinates_approximate', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.Enum(*ROUTE_STATUSES, name='routestatus'), nullable=False, server_default='planned'),
        sa.Column('driver_id', sa.Integer(), nullable=True),
        sa.Column('shipment_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_truck_routes_driver_id', 'truck_routes', ['driver_id'])


def downgrade() -> None:
    op.drop_index('ix_truck_routes_driver_id', table_name='truck_routes')
    op.drop_table('truck_routes')
    sa.Enum(name='routestatus').drop(op.get_bind(), checkfirst=True)
