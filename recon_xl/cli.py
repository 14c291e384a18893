import asyncio
import logging
import os

import click
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from recon_xl.__version__ import __version__
from recon_xl.errors import ReconError
from recon_xl.export import export_records
from recon_xl.ingest import ImportSession
from recon_xl.schema import get_schema, registered_schemas
from recon_xl.store import DbConn, SqlRecordStore

DEFAULT_CONN_STRING = "sqlite:///recon_xl.db"


class GetConn(click.ParamType):
    """A custom Click parameter type for database connection.

    The user enters a connection string (or `-` to use the
    `RECON_XL_DB_CONN_STRING` environment variable) and this class returns
    a connection to the database.
    """

    name = "conn"

    def convert(self, value, param, ctx):
        if isinstance(value, DbConn):
            return value
        try:
            if not value or value == "-":
                value = os.environ.get("RECON_XL_DB_CONN_STRING", None)
                if value is None:
                    load_dotenv()
                    value = os.environ.get(
                        "RECON_XL_DB_CONN_STRING", DEFAULT_CONN_STRING
                    )
            schema = os.environ.get("RECON_XL_DB_SCHEMA", "public")
            return DbConn(c_string=value, schema=schema)
        except Exception as e:
            self.fail(
                f"Could not create the connection '{value}': {e}",
                param,
                ctx,
            )


class GetSchema(click.ParamType):
    """Resolves a registered record schema by name."""

    name = "schema"

    def convert(self, value, param, ctx):
        try:
            return get_schema(value)
        except ReconError as e:
            self.fail(str(e), param, ctx)


def create_context_obj(debug: bool):
    """Sets up the logging and prepares the context for the CLI.

    Args:
        debug: If True, sets the logging level to DEBUG.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.debug("Debug mode is on")
    return {}


def open_store(conn: DbConn, schema) -> SqlRecordStore:
    store = SqlRecordStore(conn=conn, schema=schema)
    store.create_tables()
    return store


conn_option = click.option(
    "--conn",
    "-c",
    type=GetConn(),
    default="-",
    help="Database connection string; `-` reads RECON_XL_DB_CONN_STRING.",
)
schema_option = click.option(
    "--schema",
    "-s",
    "record_schema",
    type=GetSchema(),
    default="applicant",
    show_default=True,
    help="The record type to work with.",
)


@click.group()
@click.option("--debug/--no-debug", default=False)
@click.version_option(__version__, prog_name="recon-xl")
@click.pass_context
def cli(context: click.Context, debug: bool):
    load_dotenv()
    context.obj = create_context_obj(debug)


@cli.command()
def schemas():
    """List the record types that can be imported and exported."""
    for name, schema in sorted(registered_schemas().items()):
        click.echo(
            "%s: %s (primary key %s)"
            % (name, ", ".join(schema.export_labels()), schema.primary_key)
        )


@cli.command()
@conn_option
@schema_option
@click.option(
    "--format",
    "-f",
    "data_format",
    type=click.Choice(["xlsx", "csv", "json", "yaml"]),
    default="xlsx",
    show_default=True,
)
@click.option(
    "--out",
    "-o",
    "out_dir",
    type=click.Path(file_okay=False, writable=True),
    default=".",
    show_default=True,
    help="Directory where the file is written.",
)
def export(conn: DbConn, record_schema, data_format: str, out_dir: str):
    """Export the stored records to a file."""
    store = open_store(conn, record_schema)
    try:
        exported = export_records(
            store.list_records(), record_schema, data_format  # type: ignore
        )
    finally:
        conn.close()
    path = os.path.join(out_dir, exported.file_name)
    exported.save(path)
    click.echo(path)


def _load_session(conn: DbConn, record_schema, path: str):
    store = open_store(conn, record_schema)
    session = ImportSession(record_schema, existing=store.list_records())
    session.load_file(path)
    return store, session


@cli.command()
@conn_option
@schema_option
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def diff(conn: DbConn, record_schema, path: str):
    """Show what importing a file would change."""
    try:
        _store, session = _load_session(conn, record_schema, path)
    finally:
        conn.close()
    click.echo(session.report())
    if session.error is not None:
        raise SystemExit(1)


@cli.command(name="import")
@conn_option
@schema_option
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def import_file(conn: DbConn, record_schema, yes: bool, path: str):
    """Import a file, adding new records and updating changed ones."""
    try:
        store, session = _load_session(conn, record_schema, path)
        click.echo(session.report())
        if session.error is not None:
            raise click.ClickException("The file can not be imported")
        if not session.has_changes:
            return
        if not yes and not click.confirm("Apply these changes?"):
            click.echo("Nothing was changed.")
            return
        unsubscribe = store.subscribe(session.set_existing)
        try:
            written = asyncio.run(session.confirm(store.upsert))
        except (ReconError, SQLAlchemyError, ValueError) as e:
            raise click.ClickException(str(e)) from e
        finally:
            unsubscribe()
        click.echo("Wrote %d record(s)." % len(written))
    finally:
        conn.close()


if __name__ == "__main__":
    cli()
