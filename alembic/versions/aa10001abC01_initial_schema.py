"""initial schema

Revision ID: aa10001abC01
Revises:
Create Date: 2026-10-18 10:00:00.000000

Hey future me - this is the whole catalog + collection schema in one go.

TABLES:
- users / auth_sessions: accounts and server-side login sessions
- profiles: one per user, UNIQUE username, is_admin flag (no API sets it!)
- artists: UNIQUE slug, names may repeat (two bands called "Genesis")
- designs: belong to an artist; `year` is legacy, new rows only set `circa`
- variants: concrete garments of a design
- variant_photos / ownership_photos: uploaded photo URLs
- ownership / wantlist: UNIQUE (user_id, variant_id) each

The artists/designs/variants tables carry is_hidden for admin moderation.
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'aa10001abC01'
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)


def _is_hidden() -> sa.Column:
    return sa.Column('is_hidden', sa.Boolean(), nullable=False, server_default=sa.false())


def _created_by() -> sa.Column:
    return sa.Column(
        'created_by',
        sa.String(36),
        sa.ForeignKey('users.id', ondelete='SET NULL'),
        nullable=True,
    )


def upgrade() -> None:
    # === Accounts ===
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(320), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        _created_at(),
    )
    op.create_table(
        'auth_sessions',
        sa.Column('token', sa.String(128), primary_key=True),
        sa.Column(
            'user_id',
            sa.String(36),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        _created_at(),
    )
    op.create_index('ix_auth_sessions_user_id', 'auth_sessions', ['user_id'])

    op.create_table(
        'profiles',
        sa.Column(
            'user_id',
            sa.String(36),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            primary_key=True,
        ),
        sa.Column('username', sa.String(64), nullable=False, unique=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('avatar_url', sa.String(512), nullable=True),
        sa.Column('link_url', sa.String(512), nullable=True),
        sa.Column(
            'is_collection_public', sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # === Catalog ===
    op.create_table(
        'artists',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('origin_country', sa.String(100), nullable=True),
        sa.Column('primary_genre', sa.String(100), nullable=True),
        sa.Column('photo_url', sa.String(512), nullable=True),
        _is_hidden(),
        _created_by(),
        _created_at(),
    )
    op.create_index('ix_artists_name', 'artists', ['name'])
    op.create_index('ix_artists_created_at', 'artists', ['created_at'])
    op.create_index('ix_artists_name_lower', 'artists', [sa.text('lower(name)')])

    op.create_table(
        'designs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'artist_id',
            sa.String(36),
            sa.ForeignKey('artists.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('circa', sa.Integer(), nullable=True),
        sa.Column('primary_photo_url', sa.String(512), nullable=True),
        _is_hidden(),
        _created_by(),
        _created_at(),
    )
    op.create_index('ix_designs_artist_id', 'designs', ['artist_id'])
    op.create_index('ix_designs_created_at', 'designs', ['created_at'])

    op.create_table(
        'variants',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'design_id',
            sa.String(36),
            sa.ForeignKey('designs.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('garment_type', sa.String(50), nullable=False),
        sa.Column('base_color', sa.String(50), nullable=False),
        sa.Column('cut', sa.String(50), nullable=False),
        sa.Column('manufacturer', sa.String(100), nullable=False),
        sa.Column('print_method', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _is_hidden(),
        _created_by(),
        _created_at(),
    )
    op.create_index('ix_variants_design_id', 'variants', ['design_id'])
    op.create_index('ix_variants_created_at', 'variants', ['created_at'])

    op.create_table(
        'variant_photos',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'variant_id',
            sa.String(36),
            sa.ForeignKey('variants.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('url', sa.String(512), nullable=False),
        sa.Column('label', sa.String(255), nullable=True),
        _created_at(),
    )
    op.create_index('ix_variant_photos_variant_id', 'variant_photos', ['variant_id'])

    # === Collections ===
    op.create_table(
        'ownership',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'user_id',
            sa.String(36),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'variant_id',
            sa.String(36),
            sa.ForeignKey('variants.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('size', sa.String(20), nullable=False),
        sa.Column('memory', sa.Text(), nullable=True),
        sa.Column('setlist_url', sa.String(512), nullable=True),
        _created_at(),
        sa.UniqueConstraint('user_id', 'variant_id', name='uq_ownership_user_variant'),
    )
    op.create_index('ix_ownership_user_id', 'ownership', ['user_id'])
    op.create_index('ix_ownership_variant_id', 'ownership', ['variant_id'])

    op.create_table(
        'ownership_photos',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'ownership_id',
            sa.String(36),
            sa.ForeignKey('ownership.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('url', sa.String(512), nullable=False),
        sa.Column('label', sa.String(255), nullable=True),
        _created_at(),
    )
    op.create_index('ix_ownership_photos_ownership_id', 'ownership_photos', ['ownership_id'])

    op.create_table(
        'wantlist',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'user_id',
            sa.String(36),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'variant_id',
            sa.String(36),
            sa.ForeignKey('variants.id', ondelete='CASCADE'),
            nullable=False,
        ),
        _created_at(),
        sa.UniqueConstraint('user_id', 'variant_id', name='uq_wantlist_user_variant'),
    )
    op.create_index('ix_wantlist_user_id', 'wantlist', ['user_id'])


def downgrade() -> None:
    op.drop_table('wantlist')
    op.drop_table('ownership_photos')
    op.drop_table('ownership')
    op.drop_table('variant_photos')
    op.drop_table('variants')
    op.drop_table('designs')
    op.drop_table('artists')
    op.drop_table('profiles')
    op.drop_table('auth_sessions')
    op.drop_table('users')
