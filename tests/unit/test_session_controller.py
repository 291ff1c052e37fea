import asyncio

import httpx
import pytest

from interview_session import GenerateRequest, Session, SessionController, UserContext
from interview_session.errors import InvalidTransitionError, ValidationError
from request_client import TIMEOUT_MESSAGE


class ManualTimer:
    def __init__(self, on_tick):
        self.on_tick = on_tick
        self.running = False
        self.starts = 0

    def start(self):
        self.running = True
        self.starts += 1

    def stop(self):
        self.running = False

    def tick(self, times=1):
        for _ in range(times):
            if self.running:
                self.on_tick()


@pytest.fixture
def backend(scripted_client, routed_client, make_response, sample_questions):
    return routed_client(
        {
            "/api/generate-questions": scripted_client(
                make_response(200, {"questions": sample_questions, "questionSetId": 42})
            ),
            "/api/generate-feedback": scripted_client(make_response(200, {"feedback": "Clear STAR structure."})),
            "/api/generate-follow-up": scripted_client(
                make_response(200, {"followUpQuestion": "What would you do differently?"})
            ),
        }
    )


@pytest.fixture
def controller_factory(make_api):
    timers = []

    def _factory(client):
        def _timer(on_tick):
            timer = ManualTimer(on_tick)
            timers.append(timer)
            return timer

        controller = SessionController(make_api(client), session_id="test", timer_factory=_timer)
        controller.timer = timers[-1]
        return controller

    return _factory


def _request(**overrides):
    fields = {"job_role": "Software Engineer", "company": "Google", "number_of_questions": 5}
    fields.update(overrides)
    return GenerateRequest(**fields)


@pytest.mark.asyncio
async def test_full_practice_scenario(backend, controller_factory):
    controller = controller_factory(backend)
    seen = []
    controller.subscribe(seen.append)

    await controller.generate(_request())
    session = controller.session
    assert session.phase == "questions"
    assert len(session.questions) == 5
    assert session.question_set_id == "42"
    assert session.pending.generating is False

    controller.start_mock()
    assert controller.session.phase == "mock"
    assert controller.session.current_index == 0
    assert controller.session.elapsed_seconds == 0
    assert controller.timer.running

    for index in range(5):
        controller.timer.tick(3)
        assert controller.session.elapsed_seconds == 3
        await controller.submit_answer("I led a project...")
        assert controller.session.feedback == "Clear STAR structure."
        assert controller.session.show_feedback is True
        assert not controller.timer.running
        controller.timer.tick(2)
        assert controller.session.elapsed_seconds == 3
        assert controller.session.current_index == index
        controller.advance()

    assert controller.session.phase == "complete"
    assert not controller.timer.running
    assert seen[-1] is controller.session

    feedback_calls = backend.routes["/api/generate-feedback"].calls
    assert feedback_calls[0]["json"] == {
        "question": "Tell me about challenge 1.",
        "answer": "I led a project...",
        "timeSpent": 3,
    }


@pytest.mark.asyncio
async def test_generate_request_body_for_anonymous_user(backend, controller_factory):
    controller = controller_factory(backend)
    await controller.generate(_request(difficulty="hard", seniority="senior", question_type="technical"))

    call = backend.routes["/api/generate-questions"].calls[0]
    assert call["json"] == {
        "jobRole": "Software Engineer",
        "company": "Google",
        "difficulty": "hard",
        "experience": "senior",
        "numberOfQuestions": 5,
        "questionType": "technical",
        "userId": "anonymous",
    }
    assert "x-user-email" not in call["headers"]


@pytest.mark.asyncio
async def test_signed_in_user_registers_and_uses_authed_endpoint(
    scripted_client, routed_client, make_response, sample_questions, controller_factory
):
    client = routed_client(
        {
            "/api/db/auth/user": scripted_client(make_response(200, {"success": True})),
            "/api/db/generate-questions": scripted_client(make_response(200, {"questions": sample_questions})),
        }
    )
    controller = controller_factory(client)
    user = UserContext(email="ada@example.com", name="Ada", image="https://img.test/ada.png")
    await controller.generate(_request(), user)

    assert client.calls == ["/api/db/auth/user", "/api/db/generate-questions"]
    register = client.routes["/api/db/auth/user"].calls[0]
    assert register["json"]["googleId"] == "ada@example.com"
    generate = client.routes["/api/db/generate-questions"].calls[0]
    assert generate["headers"]["x-user-email"] == "ada@example.com"
    assert generate["json"]["userId"] == "ada@example.com"
    assert controller.session.phase == "questions"


@pytest.mark.asyncio
@pytest.mark.parametrize("job_role, company", [("", "Google"), ("Engineer", "   ")])
async def test_generate_requires_both_fields(job_role, company, backend, controller_factory):
    controller = controller_factory(backend)
    with pytest.raises(ValidationError):
        await controller.generate(_request(job_role=job_role, company=company))
    assert controller.session.error == "Please fill both fields"
    assert controller.session.phase == "input"
    assert backend.calls == []


@pytest.mark.asyncio
async def test_generate_failure_keeps_input_phase(scripted_client, routed_client, make_response, controller_factory):
    client = routed_client(
        {"/api/generate-questions": scripted_client(make_response(400, {"error": "numberOfQuestions too large"}))}
    )
    controller = controller_factory(client)
    await controller.generate(_request())
    assert controller.session.phase == "input"
    assert controller.session.error == "numberOfQuestions too large"
    assert controller.session.pending.generating is False


@pytest.mark.asyncio
async def test_generate_timeout_surfaces_fixed_message(scripted_client, routed_client, controller_factory):
    async def hang():
        await asyncio.sleep(5)

    client = routed_client({"/api/generate-questions": scripted_client(hang)})
    controller = controller_factory(client)
    await controller.generate(_request())
    assert controller.session.error == TIMEOUT_MESSAGE
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_generate_bad_payload_uses_generic_message(scripted_client, routed_client, make_response, controller_factory):
    client = routed_client({"/api/generate-questions": scripted_client(make_response(200, "oops"))})
    controller = controller_factory(client)
    await controller.generate(_request())
    assert controller.session.error == "Failed to generate questions. Please try again."


@pytest.mark.asyncio
async def test_second_generate_while_in_flight_is_dropped(
    scripted_client, routed_client, make_response, sample_questions, controller_factory
):
    release = asyncio.Event()

    async def slow():
        await release.wait()
        return make_response(200, {"questions": sample_questions})

    client = routed_client({"/api/generate-questions": scripted_client(slow)})
    controller = controller_factory(client)
    first = asyncio.create_task(controller.generate(_request()))
    await asyncio.sleep(0)
    assert controller.session.pending.generating is True

    await controller.generate(_request())
    assert controller.session.pending.generating is True

    release.set()
    await first
    assert controller.session.phase == "questions"
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_blank_answer_is_rejected_without_network_call(backend, controller_factory):
    controller = controller_factory(backend)
    await controller.generate(_request())
    controller.start_mock()

    with pytest.raises(ValidationError):
        await controller.submit_answer("   ")

    assert controller.session.phase == "mock"
    assert controller.session.feedback == ""
    assert controller.session.error == "Please provide an answer before submitting"
    assert backend.routes["/api/generate-feedback"].calls == []
    assert controller.timer.running


@pytest.mark.asyncio
async def test_feedback_failure_keeps_question_unanswered(
    scripted_client, routed_client, make_response, sample_questions, controller_factory
):
    feedback = scripted_client(make_response(500, {"message": "model overloaded"}), make_response(200, {"feedback": "ok"}))
    client = routed_client(
        {
            "/api/generate-questions": scripted_client(make_response(200, {"questions": sample_questions})),
            "/api/generate-feedback": feedback,
        }
    )
    controller = controller_factory(client)
    await controller.generate(_request())
    controller.start_mock()
    controller.set_answer("My answer")
    controller.timer.tick(4)

    await controller.submit_answer()
    assert controller.session.show_feedback is True
    assert len(feedback.calls) == 2

    controller.reset()
    await controller.generate(_request())
    controller.start_mock()
    feedback.steps = [make_response(404, {"error": "question not found"})]
    await controller.submit_answer("Another answer")
    assert controller.session.error == "question not found"
    assert controller.session.show_feedback is False
    assert controller.session.pending.submitting_answer is False
    assert not controller.timer.running
    assert controller.session.current_answer == "Another answer"


@pytest.mark.asyncio
async def test_follow_up_success_and_fallback(
    scripted_client, routed_client, make_response, sample_questions, controller_factory
):
    follow_up = scripted_client(
        make_response(200, {"followUpQuestion": "How did you measure impact?"}),
        make_response(503, ""),
    )
    client = routed_client(
        {
            "/api/generate-questions": scripted_client(make_response(200, {"questions": sample_questions})),
            "/api/generate-feedback": scripted_client(make_response(200, {"feedback": "good"})),
            "/api/generate-follow-up": follow_up,
        }
    )
    controller = controller_factory(client)
    await controller.generate(_request())
    controller.start_mock()

    with pytest.raises(InvalidTransitionError):
        await controller.request_follow_up()

    await controller.submit_answer("I cut latency by 40%.")
    await controller.request_follow_up()
    assert controller.session.follow_up == "How did you measure impact?"
    assert follow_up.calls[0]["json"] == {
        "originalQuestion": "Tell me about challenge 1.",
        "answer": "I cut latency by 40%.",
    }

    await controller.request_follow_up()
    assert controller.session.follow_up == (
        "Sorry, I couldn't generate a follow-up. Please proceed to the next question."
    )
    assert controller.session.error == ""
    assert controller.session.pending.fetching_follow_up is False


@pytest.mark.asyncio
async def test_stale_feedback_after_reset_is_ignored(
    scripted_client, routed_client, make_response, sample_questions, controller_factory
):
    release = asyncio.Event()

    async def slow_feedback():
        await release.wait()
        return make_response(200, {"feedback": "late"})

    client = routed_client(
        {
            "/api/generate-questions": scripted_client(make_response(200, {"questions": sample_questions})),
            "/api/generate-feedback": scripted_client(slow_feedback),
        }
    )
    controller = controller_factory(client)
    await controller.generate(_request())
    controller.start_mock()
    pending = asyncio.create_task(controller.submit_answer("answer"))
    await asyncio.sleep(0)
    assert controller.session.pending.submitting_answer is True

    controller.reset()
    release.set()
    await pending

    assert controller.session.phase == "input"
    assert controller.session.feedback == ""
    assert controller.session.pending.submitting_answer is False


@pytest.mark.asyncio
async def test_advance_before_feedback_is_rejected(backend, controller_factory):
    controller = controller_factory(backend)
    await controller.generate(_request())
    controller.start_mock()
    with pytest.raises(InvalidTransitionError):
        controller.advance()


@pytest.mark.asyncio
async def test_reset_from_any_phase_is_clean(backend, controller_factory):
    controller = controller_factory(backend)
    blank = Session().model_dump(exclude={"version"})

    controller.reset()
    assert controller.session.model_dump(exclude={"version"}) == blank

    await controller.generate(_request())
    controller.reset()
    assert controller.session.model_dump(exclude={"version"}) == blank

    await controller.generate(_request())
    controller.start_mock()
    await controller.submit_answer("answer")
    controller.reset()
    assert controller.session.model_dump(exclude={"version"}) == blank
    assert not controller.timer.running


@pytest.mark.asyncio
async def test_unsubscribe_stops_notifications(backend, controller_factory):
    controller = controller_factory(backend)
    seen = []
    unsubscribe = controller.subscribe(seen.append)
    controller.reset()
    unsubscribe()
    controller.reset()
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_undecodable_generate_response_sets_error(make_api):
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, headers={"content-encoding": "gzip"}, content=b"not gzip at all")
    )
    async with httpx.AsyncClient(transport=transport) as client:
        controller = SessionController(make_api(client), session_id="test")
        await controller.generate(_request())

    assert controller.session.phase == "input"
    assert controller.session.error
    assert controller.session.pending.generating is False


async def _hang():
    await asyncio.sleep(5)


@pytest.mark.asyncio
async def test_cancelled_generate_releases_pending_flag(
    scripted_client, routed_client, make_response, sample_questions, controller_factory
):
    client = routed_client(
        {"/api/generate-questions": scripted_client(_hang, make_response(200, {"questions": sample_questions}))}
    )
    controller = controller_factory(client)
    task = asyncio.create_task(controller.generate(_request()))
    await asyncio.sleep(0.05)
    assert controller.session.pending.generating is True

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert controller.session.pending.generating is False
    assert controller.session.phase == "input"

    await controller.generate(_request())
    assert controller.session.phase == "questions"
    assert len(client.calls) == 2


@pytest.mark.asyncio
async def test_cancelled_submit_releases_pending_flag(
    backend, scripted_client, make_response, controller_factory
):
    backend.routes["/api/generate-feedback"] = scripted_client(
        _hang, make_response(200, {"feedback": "Clear STAR structure."})
    )
    controller = controller_factory(backend)
    await controller.generate(_request())
    controller.start_mock()

    task = asyncio.create_task(controller.submit_answer("I owned the rollout."))
    await asyncio.sleep(0.05)
    assert controller.session.pending.submitting_answer is True

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert controller.session.pending.submitting_answer is False
    assert controller.session.show_feedback is False

    await controller.submit_answer()
    assert controller.session.feedback == "Clear STAR structure."
    assert len(backend.routes["/api/generate-feedback"].calls) == 2


@pytest.mark.asyncio
async def test_cancelled_follow_up_releases_pending_flag(backend, scripted_client, make_response, controller_factory):
    backend.routes["/api/generate-follow-up"] = scripted_client(
        _hang, make_response(200, {"followUpQuestion": "What would you do differently?"})
    )
    controller = controller_factory(backend)
    await controller.generate(_request())
    controller.start_mock()
    await controller.submit_answer("I owned the rollout.")

    task = asyncio.create_task(controller.request_follow_up())
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert controller.session.pending.fetching_follow_up is False
    await controller.request_follow_up()
    assert controller.session.follow_up == "What would you do differently?"


@pytest.mark.asyncio
async def test_rejected_blank_submit_keeps_draft_answer(backend, controller_factory):
    controller = controller_factory(backend)
    await controller.generate(_request())
    controller.start_mock()
    controller.set_answer("draft")
    before = controller.session

    with pytest.raises(ValidationError):
        await controller.submit_answer("")

    assert controller.session.current_answer == "draft"
    assert controller.session == before.model_copy(update={"error": "Please provide an answer before submitting"})
    assert backend.routes["/api/generate-feedback"].calls == []
