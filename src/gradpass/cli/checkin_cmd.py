"""Check-in commands: admit, list."""
import sys

import click

from gradpass.checkin import CheckInState, hydrate_state, record_checkin
from gradpass.core.constants import (
    INVITEE_ROLES,
    ROLE_STUDENT,
    SOURCE_MANUAL,
    SOURCE_SCANNER,
    STATUS_DUPLICATE,
)
from gradpass.core.errors import QueueOperationFailure, RemoteUnavailable
from gradpass.core.models import Invitee
from gradpass.offline.queue import default_queue
from gradpass.remote.client import CheckInClient

from .output import print_error, print_json_line, print_status, table


@click.group()
def checkin():
    """Admission recording for ceremony doors."""
    pass


@checkin.command()
@click.option('--ceremony', required=True, help='Ceremony ID')
@click.option('--invitee', 'invitee_id', required=True, help='Invitee ID')
@click.option('--ticket', required=True, help='Ticket code')
@click.option('--name', default='', help='Invitee display name')
@click.option('--role', type=click.Choice(INVITEE_ROLES), default=ROLE_STUDENT, help='Ticket holder role')
@click.option('--manual', is_flag=True, help='Admitted by hand instead of by scan')
@click.option('--operator', default=None, help='Operator label (default: GRADPASS_OPERATOR)')
@click.option('--json', 'as_json', is_flag=True,
              help='Emit the outcome as the last JSON line on stdout, after the receipts')
def admit(ceremony: str, invitee_id: str, ticket: str, name: str, role: str,
          manual: bool, operator: str | None, as_json: bool):
    """Record the admission of one invitee."""
    client = CheckInClient()
    queue = default_queue()
    invitee = Invitee(
        id=invitee_id,
        name=name or invitee_id,
        ceremony_id=ceremony,
        ticket_code=ticket,
        role=role,
    )

    try:
        state = CheckInState(ceremony_id=ceremony)
        hydrate_state(state, client, queue)
        outcome = record_checkin(
            state,
            invitee,
            client,
            queue,
            source=SOURCE_MANUAL if manual else SOURCE_SCANNER,
            operator=operator,
        )
    except QueueOperationFailure as e:
        print_error(f"Check-in NOT saved: {e}")
        sys.exit(2)

    if as_json:
        # stdout stays one JSON document per line
        print_json_line(outcome.to_dict())
        print_status(outcome.status, outcome.message, err=True)
    else:
        print_status(outcome.status, outcome.message)
    sys.exit(1 if outcome.status == STATUS_DUPLICATE else 0)


@checkin.command('list')
@click.option('--ceremony', required=True, help='Ceremony ID')
def list_checkins(ceremony: str):
    """List confirmed check-ins of a ceremony."""
    try:
        records = CheckInClient().list_checkins(ceremony)
    except RemoteUnavailable as e:
        print_error(f"Listing failed: {e}")
        sys.exit(2)

    if not records:
        click.echo("No check-ins yet")
        return

    table(
        ["Scanned at", "Ticket", "Invitee", "Source", "Operator"],
        [[r.scanned_at, r.ticket_code, r.invitee_id, r.source, r.operator or ""] for r in records],
    )
    click.echo(f"{len(records)} check-ins")
