"""
Content commands for CashGlitch.
Usage:
    flask content init
    flask content seed
"""

import click
from flask.cli import with_appcontext

from cashglitch.services import content as initializer


@click.group("content")
def content_cli():
    """Create tables and seed default site content"""
    pass


@content_cli.command("init")
@with_appcontext
def init_tables():
    """Create any missing tables (safe to re-run)"""
    initializer.initialize_all_tables()
    click.echo("✅ Tables ready.")


@content_cli.command("seed")
@with_appcontext
def seed_defaults():
    """Create tables and insert default rows where none exist"""
    click.echo("🌱 Seeding default content...")
    inserted = initializer.initialize_and_seed()

    for table, count in inserted.items():
        if count:
            click.echo(f"   {table}: {count} row(s) inserted")
        else:
            click.echo(f"⚠️  Skipping {table} (already seeded)")

    click.echo("✅ Seeded default content successfully.")
