"""Command-line client for vocal notes.

Usage:
  voicenotes list [--category C] [--search Q]
  voicenotes stats
  voicenotes record
  voicenotes add --title T --content C [--category C] [--notify ISO]
  voicenotes edit ID [--title T] [--content C] [--category C] [--notify ISO]
  voicenotes toggle ID
  voicenotes delete ID
"""
from __future__ import annotations

import argparse
import sys
from typing import Callable, List, Optional

from voicenotes.client.capture import SoundDeviceRecorder
from voicenotes.client.controller import ALL_CATEGORIES, CaptureState, NoteLifecycleController
from voicenotes.client.gateways import ExtractionGateway, TranscriptionGateway
from voicenotes.client.store import create_store
from voicenotes.core.config import Settings, settings as default_settings
from voicenotes.core.errors import PipelineBusy, VoiceNotesError
from voicenotes.core.logging import setup_logging
from voicenotes.domain.notes import CATEGORIES, Note


def build_controller(config: Optional[Settings] = None) -> NoteLifecycleController:
    cfg = config or default_settings
    store = create_store(cfg)
    transcriber = extractor = None
    if cfg.remote_store_configured:
        kwargs = dict(timeout=cfg.client_timeout_seconds, api_prefix=cfg.api_prefix_normalized)
        transcriber = TranscriptionGateway(cfg.api_base_url, **kwargs)
        extractor = ExtractionGateway(cfg.api_base_url, **kwargs)
    return NoteLifecycleController(
        store,
        recorder=SoundDeviceRecorder(),
        transcriber=transcriber,
        extractor=extractor,
    )


def _line(note: Note) -> str:
    done = "[x] " if note.completed else ""
    bell = f"  (reminder {note.notification_date})" if note.has_notification and note.notification_date else ""
    return f"{note.id}  {note.created_at[:10]}  {note.category:<12} {done}{note.title}{bell}"


def _find(ctl: NoteLifecycleController, note_id: str) -> Optional[Note]:
    return next((n for n in ctl.notes if n.id == note_id), None)


def _apply_fields(ctl: NoteLifecycleController, args: argparse.Namespace) -> None:
    fields = {}
    if args.title is not None:
        fields["title"] = args.title
    if args.content is not None:
        fields["content"] = args.content
    if args.category is not None:
        fields["category"] = args.category
    if args.notify is not None:
        fields["has_notification"] = bool(args.notify)
        fields["notification_date"] = args.notify
    ctl.update_draft(**fields)


def _save(ctl: NoteLifecycleController, out) -> int:
    stored = ctl.confirm()
    if stored is None:
        print(f"Not saved: {ctl.last_error}", file=out)
        ctl.cancel()
        return 1
    print(f"Saved {stored.id}: {stored.title}", file=out)
    return 0


def cmd_list(ctl, args, out, _input) -> int:
    for note in ctl.visible_notes(args.search or "", args.category or ALL_CATEGORIES):
        print(_line(note), file=out)
    return 0


def cmd_stats(ctl, _args, out, _input) -> int:
    for name, count in ctl.stats().items():
        print(f"{name:<13}{count}", file=out)
    return 0


def cmd_record(ctl, _args, out, read: Callable[[str], str]) -> int:
    if not ctl.start_capture():
        print(f"Error: {ctl.last_error}", file=out)
        return 1
    read("Recording... press Enter to stop ")
    draft = ctl.stop_capture()
    if ctl.last_error:
        print(f"Warning: {ctl.last_error}", file=out)
    print(f"Title:    {draft.title}", file=out)
    print(f"Category: {draft.category}", file=out)
    print(f"Content:  {draft.content}", file=out)
    if draft.has_notification:
        print("Reminder: on (urgent)", file=out)
    if read("Save this note? [Y/n] ").strip().lower() in ("n", "no"):
        ctl.cancel()
        print("Discarded.", file=out)
        return 0
    return _save(ctl, out)


def cmd_add(ctl, args, out, _input) -> int:
    ctl.new_manual_note()
    _apply_fields(ctl, args)
    return _save(ctl, out)


def cmd_edit(ctl, args, out, _input) -> int:
    note = _find(ctl, args.id)
    if note is None:
        print(f"No note {args.id}", file=out)
        return 1
    ctl.edit_existing(note)
    _apply_fields(ctl, args)
    return _save(ctl, out)


def cmd_toggle(ctl, args, out, _input) -> int:
    note = _find(ctl, args.id)
    if note is None:
        print(f"No note {args.id}", file=out)
        return 1
    stored = ctl.toggle_completed(note)
    if stored is None:
        print(f"Error: {ctl.last_error}", file=out)
        return 1
    print(f"{stored.id} completed={stored.completed}", file=out)
    return 0


def cmd_delete(ctl, args, out, _input) -> int:
    if not ctl.remove(args.id):
        print(f"Error: {ctl.last_error}", file=out)
        return 1
    print(f"Deleted {args.id}", file=out)
    return 0


def _note_fields(p: argparse.ArgumentParser, required: bool) -> None:
    p.add_argument("--title", required=required)
    p.add_argument("--content", required=required)
    p.add_argument("--category", choices=CATEGORIES)
    p.add_argument("--notify", metavar="ISO", help="reminder date/time; enables the reminder")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="voicenotes", description="Vocal notes client")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="list notes, newest first")
    p.add_argument("--category", choices=(ALL_CATEGORIES,) + CATEGORIES)
    p.add_argument("--search")
    p.set_defaults(func=cmd_list)

    sub.add_parser("stats", help="count notes per category").set_defaults(func=cmd_stats)
    sub.add_parser("record", help="record a voice note").set_defaults(func=cmd_record)

    p = sub.add_parser("add", help="add a note manually")
    _note_fields(p, required=True)
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("edit", help="edit a note")
    p.add_argument("id")
    _note_fields(p, required=False)
    p.set_defaults(func=cmd_edit)

    for name, func, help_text in (
        ("toggle", cmd_toggle, "flip the completed flag"),
        ("delete", cmd_delete, "delete a note"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("id")
        p.set_defaults(func=func)
    return parser


def main(
    argv: Optional[List[str]] = None,
    controller: Optional[NoteLifecycleController] = None,
    out=None,
    read: Callable[[str], str] = input,
) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    out = out or sys.stdout
    ctl = controller or build_controller()
    try:
        ctl.reload()
    except VoiceNotesError as e:
        print(f"Error: {e.message}", file=out)
        return 1
    try:
        return args.func(ctl, args, out, read)
    except PipelineBusy as e:
        print(f"Error: {e.message}", file=out)
        return 1
    finally:
        if ctl.state is CaptureState.RECORDING:
            ctl.abandon_capture()


if __name__ == "__main__":
    sys.exit(main())
