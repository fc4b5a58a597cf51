from __future__ import annotations

"""CLI for the quiz engine using QuizController."""

import argparse
import sys
from typing import Any, Dict, Optional

from .. import __version__
from ..config.config import MISTAKES_SUBJECT, ConfigError, list_subjects, load_config, validate_config
from ..engine.timer import format_time
from ..errors import CallerMisuseError, NetworkError, ValidationError
from ..stats.stats import format_result, format_summary, summarize_history
from ..storage.store import Store
from ..util.randomness import seed_if_needed
from .session_manager import QuizController

HELP = "A-D/1-4 answer, n next, p prev, g N jump, b bookmark, x clear, s submit, q quit"


def _render_question(ctl: QuizController) -> None:
    s = ctl.engine.session
    if s is None:
        return
    q = s.current
    head = f"\nQ{s.current_idx + 1}/{len(s.questions)}  answered {s.answered_count}/{len(s.questions)}"
    if s.config.timed:
        head += f"  [{format_time(s.time_left)}]"
    if s.current_idx in s.bookmarks:
        head += "  *bookmarked*"
    print(head)
    print(q.text)
    chosen = s.answer_for(s.current_idx)
    for i, opt in enumerate(q.options):
        mark = ">" if chosen == i else " "
        label = chr(ord("A") + i) if i < 26 else str(i + 1)
        print(f" {mark} {label}. {opt}")


def _parse_option(cmd: str, n_options: int) -> Optional[int]:
    c = cmd.strip().lower()
    if len(c) == 1 and "a" <= c <= "z":
        idx = ord(c) - ord("a")
    elif c.isdigit():
        idx = int(c) - 1
    else:
        return None
    return idx if 0 <= idx < n_options else None


def _show_result(result: Dict[str, Any], rid: Optional[str]) -> None:
    print("\nQuiz Summary:")
    print(format_result(result))
    if rid:
        print(f"Saved as {rid}")


def _run_loop(ctl: QuizController) -> int:
    def on_time_up(result, rid) -> None:
        print("\nTime's up! Submitting your answers.")
        _show_result(result.to_dict(), rid)
        print("(press Enter)")

    ctl.on_time_up = on_time_up
    print(HELP)
    while ctl.engine.active:
        _render_question(ctl)
        try:
            cmd = input("> ").strip()
        except EOFError:
            cmd = "q"
        if not ctl.engine.active:
            break
        s = ctl.engine.session
        low = cmd.lower()
        if low == "s" and s is not None:
            try:
                result, rid = ctl.finish()
            except CallerMisuseError:
                # The countdown already submitted this attempt
                print("Quiz was already submitted.")
                return 0
            _show_result(result.to_dict(), rid)
            return 0
        if low == "q":
            ctl.abandon()
            print("Quiz abandoned.")
            return 0
        if low == "n":
            if not ctl.move(1):
                print("Last question. Press s to submit.")
            continue
        if low == "p":
            ctl.move(-1)
            continue
        if low == "b":
            ctl.toggle_bookmark()
            continue
        if low == "x":
            ctl.clear_answer()
            continue
        if low.startswith("g "):
            try:
                ok = ctl.move_to(int(low[2:].strip()) - 1)
            except ValueError:
                ok = False
            if not ok:
                print("No such question.")
            continue
        if s is None:
            break
        idx = _parse_option(cmd, len(s.current.options))
        if idx is None:
            print(HELP)
            continue
        decision = ctl.answer(idx)
        if decision is not None and decision.feedback:
            print(decision.feedback)
        if decision is not None and decision.action == "next":
            ctl.move(1)
    return 0


def _report(store: Store, plot_path: Optional[str], export_path: Optional[str]) -> int:
    from ..analytics import (
        AnalyticsConfig,
        compute_metrics,
        ewma_by_session,
        export_ndjson,
        export_parquet,
        history_frame,
        outcomes_frame,
        plot_trend,
        subject_summary,
        weak_topics,
    )

    history = store.history()
    if not history:
        print("No attempts yet.")
        return 0
    acfg = AnalyticsConfig()
    df = compute_metrics(history_frame(history))
    print("By subject:")
    print(subject_summary(df).to_string())
    weak = weak_topics(outcomes_frame(history), acfg)
    if not weak.empty:
        print("\nWeakest topics:")
        print(weak.to_string())
    if plot_path:
        df = ewma_by_session(df, value_col="accuracy", span=acfg.smoothing_span)
        if plot_trend(df, value_col="accuracy", save_path=plot_path):
            print(f"\nTrend plot written to {plot_path}")
    if export_path:
        if export_path.endswith(".parquet"):
            export_parquet(df, export_path)
        else:
            export_ndjson(df, export_path)
        print(f"History exported to {export_path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="upscquiz")
    p.add_argument("--version", action="version", version=f"upscquiz {__version__}")
    p.add_argument("--config", default=None, help="Path to YAML config")
    p.add_argument("--store", default=None, help="Override storage path")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("subjects")
    sp.add_argument("--paper", choices=["gs1", "csat"], default=None)

    rp = sub.add_parser("run")
    rp.add_argument("subject", help=f"Subject id or name, or '{MISTAKES_SUBJECT}'")
    rp.add_argument("--paper", choices=["gs1", "csat"], default=None)
    rp.add_argument("--mode", choices=["test", "learning"], default=None)
    rp.add_argument("--count", type=int, default=None)
    rp.add_argument("--explain", action="store_true")

    sub.add_parser("resume")
    sub.add_parser("history")
    sub.add_parser("mistakes")
    sub.add_parser("stats")

    ap = sub.add_parser("report")
    ap.add_argument("--plot", default=None, help="Write an accuracy trend PNG here")
    ap.add_argument("--export", default=None, help="Write history as .parquet or .ndjson")
    sub.add_parser("clear")

    args = p.parse_args(argv)

    try:
        cfg = validate_config(load_config(args.config))
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    if args.store:
        cfg["storage"]["path"] = args.store
    store = Store.from_config(cfg)

    if args.cmd == "subjects":
        for s in list_subjects(cfg, args.paper):
            print(f"{s['paper']:<5} {s['id']:<10} {s['name']}  ({s['file']})")
        return 0

    if args.cmd == "history":
        for h in store.history():
            print(f"{h.get('savedAt', '')[:16]}  {h.get('subject', ''):<18} "
                  f"{float(h.get('score', 0)):6.2f}  {h.get('accuracy', 0)}%")
        return 0

    if args.cmd == "mistakes":
        for m in store.mistakes():
            opts = m.get("options", [])
            ua = m.get("userAns")
            yours = opts[ua] if isinstance(ua, int) and 0 <= ua < len(opts) else "-"
            right = opts[m["correct"]] if 0 <= int(m.get("correct", 0)) < len(opts) else "?"
            print(f"- {m.get('text')}\n    yours: {yours} | correct: {right}")
        return 0

    if args.cmd == "stats":
        print(format_summary(summarize_history(store.history())))
        return 0

    if args.cmd == "report":
        return _report(store, args.plot, args.export)

    if args.cmd == "clear":
        ok = store.clear_all()
        print("Cleared saved data." if ok else "Could not clear saved data.")
        return 0 if ok else 1

    seed_if_needed()
    ctl = QuizController(cfg, store)

    if args.cmd == "resume":
        if ctl.resume() is None:
            print("No saved session to resume.")
            return 1
        return _run_loop(ctl)

    if args.cmd == "run":
        if args.explain:
            from .explain import enable as explain_enable
            explain_enable(True)
        try:
            ctl.start(args.subject, count=args.count, mode=args.mode, paper=args.paper)
        except ValidationError as e:
            print(f"Cannot start quiz for '{args.subject}':\n{e}", file=sys.stderr)
            return 1
        except NetworkError as e:
            print(f"Could not load quiz data: {e}", file=sys.stderr)
            return 1
        except ValueError as e:
            print(f"Invalid quiz settings: {e}", file=sys.stderr)
            return 2
        if ctl.dropped_items:
            print(f"[WARN] {ctl.dropped_items} malformed questions were skipped.")
        return _run_loop(ctl)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
