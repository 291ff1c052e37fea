"""Terminal front-end for a mock-interview practice run."""
from __future__ import annotations

import argparse
import asyncio
from typing import Callable, Optional

from config.settings import settings
from interview_session import (
    GenerateRequest,
    InterviewApi,
    Session,
    SessionController,
    UserContext,
    ValidationError,
    format_time,
)


def make_renderer() -> Callable[[Session], None]:
    shown = {"error": ""}

    def render(session: Session) -> None:
        if session.error and session.error != shown["error"]:
            print(f"! {session.error}")
        shown["error"] = session.error

    return render


async def _prompt(text: str) -> str:
    # Read on a worker thread so the question timer keeps ticking.
    return (await asyncio.to_thread(input, text)).strip()


async def run(args: argparse.Namespace, api: Optional[InterviewApi] = None) -> None:
    api = api or InterviewApi(args.api_url)
    controller = SessionController(api)
    controller.subscribe(make_renderer())
    user: Optional[UserContext] = UserContext(email=args.email) if args.email else None

    request = GenerateRequest(
        job_role=args.role,
        company=args.company,
        difficulty=args.difficulty,
        seniority=args.seniority,
        question_type=args.question_type,
        number_of_questions=args.count,
    )
    print("Generating questions...")
    await controller.generate(request, user)
    if controller.session.phase != "questions":
        return
    if not controller.session.questions:
        print("No questions were generated.")
        return
    for number, question in enumerate(controller.session.questions, start=1):
        print(f"{number}. [{question.type}/{question.difficulty}] {question.text}")

    controller.start_mock()
    try:
        while controller.session.phase == "mock":
            session = controller.session
            question = session.current_question
            print(f"\nQuestion {session.current_index + 1}/{len(session.questions)}: {question.text}")
            answer = await _prompt("Your answer: ")
            try:
                await controller.submit_answer(answer)
            except ValidationError:
                continue
            if not controller.session.show_feedback:
                continue
            print(f"Time spent: {format_time(controller.session.elapsed_seconds)}")
            print(f"Feedback: {controller.session.feedback}")
            if args.follow_up:
                await controller.request_follow_up()
                print(f"Follow-up: {controller.session.follow_up}")
            controller.advance()
        print("\nInterview complete.")
    finally:
        controller.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Practice a mock interview from the terminal")
    parser.add_argument("--role", required=True, help="Job role, e.g. 'Software Engineer'")
    parser.add_argument("--company", required=True, help="Target company")
    parser.add_argument("--difficulty", choices=["easy", "medium", "hard"], default="medium")
    parser.add_argument("--seniority", default="mid-level")
    parser.add_argument(
        "--question-type",
        choices=["behavioral", "technical", "situational", "all"],
        default="all",
    )
    parser.add_argument("--count", type=int, default=5, help="Number of questions")
    parser.add_argument("--email", help="Signed-in user email; enables saved question sets")
    parser.add_argument("--follow-up", action="store_true", help="Ask for a follow-up after each answer")
    parser.add_argument("--api-url", default=settings.API_URL)
    args = parser.parse_args()
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
