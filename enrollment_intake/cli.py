# cli.py
"""
Flask CLI commands for the enrollment intake service.
"""

import os

import click
from flask.cli import with_appcontext

from enrollment_intake.errors import IntakeError
from enrollment_intake.extensions import db
from enrollment_intake.models.enrollment import EnrollmentStatus


@click.command("init-db")
@with_appcontext
def init_db():
    """Create all database tables."""
    from enrollment_intake import models  # noqa: F401 - registers tables

    db.create_all()
    click.echo("Database tables created.")


@click.command("set-enrollment-status")
@click.argument("enrollment_id")
@click.argument("status", type=click.Choice(EnrollmentStatus.TRANSITIONS[EnrollmentStatus.PENDING]))
@with_appcontext
def set_enrollment_status(enrollment_id, status):
    """
    Approve or reject a pending application.

    Example usage:
        flask set-enrollment-status 3f2b...c9e1 approved
    """
    from enrollment_intake.services.enrollment_service import EnrollmentService

    try:
        enrollment = EnrollmentService.update_status(enrollment_id, status)
    except (IntakeError, ValueError) as e:
        message = e.message if isinstance(e, IntakeError) else str(e)
        raise click.ClickException(message)

    click.echo(f"Application {enrollment.application_id} ({enrollment.full_name}) marked {enrollment.status}.")


@click.command("export-enrollments")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True),
              help="CSV file to write; defaults to a timestamped file in the current directory")
@click.option("--course", help="Only applications for this course")
@click.option("--status", type=click.Choice(EnrollmentStatus.ALL),
              help="Only applications with this status")
@click.option("--search", help="Case-insensitive match on names, email and course")
@with_appcontext
def export_enrollments(output, course, status, search):
    """Export applications to CSV."""
    from enrollment_intake.services.enrollment_service import EnrollmentService
    from enrollment_intake.utils.export_data import export_enrollments_to_csv

    enrollments = EnrollmentService.filtered_query(course, status, search).all()
    csv_text, filename = export_enrollments_to_csv(enrollments)

    path = output or os.path.join(os.getcwd(), filename)
    with open(path, 'w', encoding='utf-8', newline='') as fh:
        fh.write(csv_text)

    click.echo(f"Exported {len(enrollments)} applications to {path}")


def register_cli_commands(app):
    """Register all CLI commands with the Flask app."""
    app.cli.add_command(init_db)
    app.cli.add_command(set_enrollment_status)
    app.cli.add_command(export_enrollments)
