"""pagegen command-line interface.

Runs the same operations as the HTTP API directly against the database.
The operator of this tool is trusted with the admin capability.

Usage:
    pagegen generate --template <uuid> --csv products.csv [--status draft] [--parent <uuid>]
    pagegen update --template <uuid> --csv products.csv [--parent <uuid>]
    pagegen delete-all --yes
    pagegen delete-by-source products.csv
    pagegen issue-token --email admin@example.com --role admin

All commands print a JSON summary to stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import uuid
from collections.abc import Awaitable, Callable
from pathlib import Path

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pagegen.api.auth import create_access_token
from pagegen.common.config import settings
from pagegen.common.database import get_engine, get_session_factory
from pagegen.common.errors import PageGenError
from pagegen.common.logging import configure_logging
from pagegen.common.models import User
from pagegen.generation.deleter import DeletionEngine
from pagegen.generation.generator import GenerationEngine
from pagegen.generation.preferences import PreferencesService
from pagegen.generation.reconciler import ReconciliationEngine
from pagegen.generation.results import BatchReport
from pagegen.stores.postgres_store import PostgresDocumentStore, PostgresSettingsStore

logger = structlog.get_logger()

Command = Callable[[AsyncSession, argparse.Namespace], Awaitable[dict]]


def output_json(data: dict) -> None:
    print(json.dumps(data, indent=2, default=str))


def _report_summary(report: BatchReport) -> dict:
    return {
        "operation": report.operation,
        "source_filename": report.source_filename,
        "message": report.message,
        "created": report.created,
        "updated": report.updated,
        "failed": report.failed,
        "document_ids": [str(doc_id) for doc_id in report.document_ids],
    }


async def cmd_generate(session: AsyncSession, args: argparse.Namespace) -> dict:
    report = await GenerationEngine(PostgresDocumentStore(session)).generate(
        args.template,
        args.csv,
        status=args.status,
        source_filename=args.filename or args.csv.name,
        parent_id=args.parent,
    )
    if report.preferences is not None:
        await PreferencesService(PostgresSettingsStore(session)).save(report.preferences)
    return _report_summary(report)


async def cmd_update(session: AsyncSession, args: argparse.Namespace) -> dict:
    engine = ReconciliationEngine(PostgresDocumentStore(session))
    if args.skip_unchanged:
        engine.skip_unchanged = True
    report = await engine.reconcile(
        args.template,
        args.csv,
        source_filename=args.filename or args.csv.name,
        parent_id=args.parent,
    )
    return _report_summary(report)


async def cmd_delete_all(session: AsyncSession, args: argparse.Namespace) -> dict:
    report = await DeletionEngine(PostgresDocumentStore(session)).delete_all(authorized=args.yes)
    return {"message": report.message, "deleted": report.deleted, "failed": report.failed}


async def cmd_delete_by_source(session: AsyncSession, args: argparse.Namespace) -> dict:
    report = await DeletionEngine(PostgresDocumentStore(session)).delete_by_source(args.filename)
    return {
        "message": report.message,
        "deleted": report.deleted,
        "failed": report.failed,
        "source_filename": report.source_filename,
    }


async def cmd_issue_token(session: AsyncSession, args: argparse.Namespace) -> dict:
    result = await session.execute(select(User).where(User.email == args.email))
    user = result.scalar_one_or_none()
    if user is None:
        user = User(email=args.email, name=args.name or args.email, role=args.role)
        session.add(user)
        await session.flush()
        logger.info("user_created", email=args.email, role=args.role)
    elif user.role != args.role:
        user.role = args.role
    return {"access_token": create_access_token(user.id, user.email), "user_id": str(user.id), "role": user.role}


async def run_command(command: Command, args: argparse.Namespace) -> dict:
    async with get_session_factory()() as session:
        try:
            summary = await command(session, args)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await get_engine().dispose()
    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagegen",
        description="Generate, update and delete documents from CSV files",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # generate
    p_gen = subparsers.add_parser("generate", help="Create one document per CSV row")
    p_gen.add_argument("--template", required=True, type=uuid.UUID, help="Template document ID")
    p_gen.add_argument("--csv", required=True, type=Path, help="Path to CSV file")
    p_gen.add_argument("--status", default=None, help=f"Publication status (default: {settings.default_post_status})")
    p_gen.add_argument("--parent", type=uuid.UUID, default=None, help="Parent document ID")
    p_gen.add_argument("--filename", default=None, help="Source filename label (default: CSV file name)")
    p_gen.set_defaults(func=cmd_generate)

    # update
    p_upd = subparsers.add_parser("update", help="Update generated documents whose titles match CSV rows")
    p_upd.add_argument("--template", required=True, type=uuid.UUID, help="Template document ID")
    p_upd.add_argument("--csv", required=True, type=Path, help="Path to CSV file")
    p_upd.add_argument("--parent", type=uuid.UUID, default=None, help="Parent document ID")
    p_upd.add_argument("--filename", default=None, help="Source filename label (default: CSV file name)")
    p_upd.add_argument("--skip-unchanged", action="store_true", help="Leave documents whose row fingerprint is unchanged")
    p_upd.set_defaults(func=cmd_update)

    # delete-all
    p_all = subparsers.add_parser("delete-all", help="Permanently delete every generated document")
    p_all.add_argument("--yes", action="store_true", help="Confirm deletion")
    p_all.set_defaults(func=cmd_delete_all)

    # delete-by-source
    p_src = subparsers.add_parser("delete-by-source", help="Delete documents generated from one CSV file")
    p_src.add_argument("filename", help="Source CSV filename")
    p_src.set_defaults(func=cmd_delete_by_source)

    # issue-token
    p_tok = subparsers.add_parser("issue-token", help="Create or update a user and print an access token")
    p_tok.add_argument("--email", required=True)
    p_tok.add_argument("--name", default=None)
    p_tok.add_argument("--role", choices=["viewer", "editor", "admin"], default="editor")
    p_tok.set_defaults(func=cmd_issue_token)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.log_level, file=sys.stderr)

    try:
        summary = asyncio.run(run_command(args.func, args))
    except PageGenError as e:
        output_json({"error": type(e).__name__, "message": str(e)})
        return 1

    output_json(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
