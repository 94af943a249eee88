import logging
import signal
from typing import Callable, Optional

from app_config import (
    AppConfig,
    AppConfigurationError,
    SecretConfig,
    load_app_config,
    load_secret_config,
    resolve_config_path,
)
from app_config_schema import STORE_BACKEND_MEMORY
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from server import ServerConfigurationError, UIServer, UIServerConfig
from session import (
    PomodoroSettings,
    SessionEngine,
    SessionStoreLike,
    SessionValidationError,
    StreakTrackerLike,
    repeating_ticker_factory,
)
from store import (
    InMemorySessionStore,
    InMemoryStreakTracker,
    RestClient,
    RestSessionStore,
    RestStreakTracker,
)


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("runtime")


def setup_signal_handlers(request_shutdown: Callable[[], None]) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""
    logger = logging.getLogger("runtime")

    def signal_handler(signum: int, frame) -> None:
        del frame
        logger.info("%s received, stopping...", signal.Signals(signum).name)
        request_shutdown()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def build_stores(
    app_config: AppConfig,
    secret_config: SecretConfig,
) -> tuple[SessionStoreLike, StreakTrackerLike]:
    """Create the session store and streak tracker for the configured backend."""
    if app_config.store.backend == STORE_BACKEND_MEMORY:
        return InMemorySessionStore(), InMemoryStreakTracker()

    client = RestClient(
        app_config.store.base_url,
        secret_config.api_key or "",
        access_token=secret_config.access_token,
        timeout_seconds=app_config.store.timeout_seconds,
        logger=logging.getLogger("session_store"),
    )
    return RestSessionStore(client), RestStreakTracker(client)


def build_pomodoro_settings(app_config: AppConfig) -> PomodoroSettings:
    defaults = app_config.pomodoro
    return PomodoroSettings(
        study_seconds=defaults.study_minutes * 60,
        short_break_seconds=defaults.short_break_minutes * 60,
        long_break_seconds=defaults.long_break_minutes * 60,
        cycles=defaults.cycles,
        long_break_interval=defaults.long_break_interval,
    )


def main() -> int:
    """Run the study session timer service."""
    logger = setup_logging(level=logging.INFO)

    # Load typed app configuration and secrets.
    try:
        config_path = resolve_config_path()
        app_config = load_app_config(str(config_path))
        secret_config = load_secret_config(store_backend=app_config.store.backend)
        logger.info("Loaded runtime config: %s", config_path)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    try:
        session_store, streak_tracker = build_stores(app_config, secret_config)
        session_logger = logging.getLogger("session")
        engine = SessionEngine(
            secret_config.user_id,
            session_store,
            streak_tracker,
            break_seconds=app_config.timer.break_minutes * 60,
            pomodoro_settings=build_pomodoro_settings(app_config),
            ticker_factory=repeating_ticker_factory(
                app_config.timer.tick_interval_seconds,
                logger=session_logger,
            ),
            logger=session_logger,
        )
    except (SessionValidationError, ValueError) as error:
        logger.error("Session engine initialization error: %s", error)
        return 1
    logger.info("Session store backend: %s", app_config.store.backend)

    # Optional UI server for static page + websocket commands
    ui_server: Optional[UIServer] = None
    ui_server_config: Optional[UIServerConfig] = None
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        logger.warning("Continuing without UI server.")

    if ui_server_config and ui_server_config.enabled:
        try:
            ui_server = UIServer(
                config=ui_server_config,
                logger=logging.getLogger("ui_server"),
            )
            logger.info("Starting UI server...")
            ui_server.start(timeout_seconds=5.0)
            logger.info("UI server ready at %s", ui_server_config.base_url)
        except Exception as error:
            logger.error("UI server startup failed: %s", error)
            logger.warning("Continuing without UI server.")
            ui_server = None

    runtime = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            engine=engine,
            ui_server=ui_server,
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
        )
    )
    return runtime.run()


if __name__ == "__main__":
    raise SystemExit(main())
