"""Lightweight CLI helpers for inspecting interview progress and scoring."""
from __future__ import annotations

import argparse
import json
import sqlite3

from config.settings import settings


def tail_interviews(limit: int = 20) -> None:
    conn = sqlite3.connect(settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT created_at, interview_id, user_id, status, current_question_index, total_questions, report_id
            FROM interviews
            ORDER BY rowid DESC
            LIMIT ?
            """,
            (limit,),
        )
        for row in cursor.fetchall():
            ts, interview_id, user_id, status, index, total, report_id = row
            print(f"[{ts}] {interview_id}/{user_id} {status} {index}/{total} report={report_id or '-'}")
    finally:
        conn.close()


def tail_responses(limit: int = 20) -> None:
    conn = sqlite3.connect(settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT created_at, interview_id, question_id, evaluation_json
            FROM responses
            ORDER BY rowid DESC
            LIMIT ?
            """,
            (limit,),
        )
        for row in cursor.fetchall():
            ts, interview_id, question_id, evaluation_json = row
            evaluation = json.loads(evaluation_json)
            flags = [name for name, raised in evaluation.get("flags", {}).items() if raised]
            print(
                f"[{ts}] {interview_id}:{question_id} overall={evaluation.get('overallScore')} "
                f"source={evaluation.get('source')} flags={','.join(flags) or '-'}"
            )
    finally:
        conn.close()


def main(argv=None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-interviews", type=int, help="Show the latest interviews and their progress")
    parser.add_argument("--tail-responses", type=int, help="Show the latest scored responses")
    args = parser.parse_args(argv)

    if args.tail_interviews:
        tail_interviews(args.tail_interviews)
    if args.tail_responses:
        tail_responses(args.tail_responses)


if __name__ == "__main__":
    main()
