import threading

import click
from smart_library import db


def register_commands(app):
    """Attach the management commands to `flask`"""

    @app.cli.command('init-db')
    def init_db():
        """Initialize the database"""
        from smart_library import models  # noqa: F401
        db.create_all()
        click.echo('Database initialized successfully!')

    @app.cli.command('create-admin')
    @click.option('--name', prompt='Enter admin name')
    @click.option('--email', prompt='Enter admin email')
    @click.option('--password', prompt='Enter admin password', hide_input=True, confirmation_prompt=True)
    @click.option('--role', type=click.Choice(['super_admin', 'admin', 'staff']), default='admin',
                  show_default=True)
    def create_admin(name, email, password, role):
        """Create a back-office account"""
        from smart_library.models.user import Admin, AdminRole
        from smart_library.utils.validators import validate_email, validate_password

        if not validate_email(email):
            click.echo('Error: Invalid email format!')
            return

        is_valid, message = validate_password(password)
        if not is_valid:
            click.echo(f'Error: {message}')
            return

        if Admin.query.filter_by(email=email.lower()).first():
            click.echo('Error: Email already exists!')
            return

        admin = Admin(name=name, email=email.lower(), role=AdminRole(role))
        admin.set_password(password)
        db.session.add(admin)
        db.session.commit()

        click.echo(f"Admin '{email}' created successfully!")

    @app.cli.command('seed-db')
    @click.option('--seats', default=50, show_default=True, help='Number of seats to create')
    def seed_db(seats):
        """Insert default plans, seats and a super admin"""
        from smart_library.seed import seed_all, DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD

        db.create_all()
        counts = seed_all(seats)
        click.echo(f"[OK] Created {counts['plans']} plans, {counts['seats']} seats, {counts['admins']} admins")
        if counts['admins']:
            click.echo(f'Admin login: {DEFAULT_ADMIN_EMAIL} / {DEFAULT_ADMIN_PASSWORD}')

    @app.cli.command('run-notifications')
    @click.option('--loop', is_flag=True, help='Keep running and repeat on an interval')
    @click.option('--every', default=3600, show_default=True, help='Seconds between runs with --loop')
    def run_notifications(loop, every):
        """Send birthday, expiry and advance-booking notifications and expire finished bookings"""
        from smart_library.services.scheduler import run_scheduled_notifications, run_forever

        if not loop:
            results = run_scheduled_notifications()
            for name, count in results.items():
                click.echo(f'{name}: {count}')
            return

        stop_event = threading.Event()
        try:
            run_forever(app, interval_seconds=every, stop_event=stop_event)
        except KeyboardInterrupt:
            stop_event.set()
            click.echo('Stopped')
