from datetime import timedelta
from apscheduler.triggers.interval import IntervalTrigger
from core.config import settings
from models.auth_tokens import AuthToken, RememberFlag, TokenType
from services.token_cleanup import CLEANUP_JOB_ID, TokenCleanupScheduler, run_cleanup_once
from services.token_service import utc_timestamp


def test_run_cleanup_once_sweeps_idle_and_expired_tokens(session, session_factory, make_token):
    now = utc_timestamp()
    make_token(last_activity=now - settings.SESSION_LIFETIME_SECONDS - 60)
    make_token(last_activity=now, token_type=TokenType.PERSISTENT, expires=now - 10)
    active = make_token(last_activity=now).id
    remembered = make_token(
        last_activity=now - settings.SESSION_LIFETIME_SECONDS - 60,
        remember=RememberFlag.REMEMBER
    ).id
    session.commit()

    run_cleanup_once(session_factory)

    assert {t.id for t in session.query(AuthToken).all()} == {active, remembered}


def test_scheduler_registers_interval_job(session_factory):
    cleanup = TokenCleanupScheduler(session_factory, interval_seconds=900)

    cleanup.start()
    try:
        job = cleanup.scheduler.get_job(CLEANUP_JOB_ID)
        assert job is not None
        assert isinstance(job.trigger, IntervalTrigger)
        assert job.trigger.interval == timedelta(seconds=900)
        assert job.args == (session_factory,)
    finally:
        cleanup.shutdown()

    assert cleanup.scheduler.running is False


def test_scheduler_registers_job_once(session_factory):
    cleanup = TokenCleanupScheduler(session_factory, interval_seconds=900)

    cleanup._register_jobs()
    cleanup._register_jobs()

    assert len(cleanup.scheduler.get_jobs()) == 1


def test_scheduler_shutdown_without_start_is_noop(session_factory):
    cleanup = TokenCleanupScheduler(session_factory, interval_seconds=900)

    cleanup.shutdown()

    assert cleanup.scheduler.running is False
