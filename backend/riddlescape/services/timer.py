import threading
from typing import Dict

from riddlescape import socketio
from riddlescape.services.session import SessionController


def session_room(identity: str) -> str:
    return f"session:{identity}"


class TickScheduler:
    """At most one live tick source per browser identity.

    Each scheduled loop is bound to the controller generation it was
    installed for. Starting or resetting a run moves the generation, so an
    older loop notices on its next wake-up and exits without ticking.
    """

    def __init__(self):
        self._active: Dict[str, int] = {}
        self._lock = threading.Lock()

    def schedule(self, app, identity: str, controller: SessionController) -> None:
        generation = controller.generation
        with self._lock:
            previous = self._active.get(identity)
            self._active[identity] = generation
        if previous is not None and previous != generation:
            app.logger.info(f"[timer-replace] session={identity} generation {previous} -> {generation}")

        if app.config.get('TESTING') and not app.config.get('ENABLE_TIMER_IN_TESTS'):
            return

        app.logger.info(
            f"[timer-set] session={identity} generation={generation} remaining={controller.remaining_seconds}s"
        )
        socketio.start_background_task(self.run_tick_loop, app, identity, controller, generation)

    def cancel(self, identity: str) -> None:
        with self._lock:
            self._active.pop(identity, None)

    def is_current(self, identity: str, generation: int) -> bool:
        with self._lock:
            return self._active.get(identity) == generation

    def run_tick_loop(self, app, identity: str, controller: SessionController, generation: int) -> None:
        interval = float(app.config.get('TICK_INTERVAL_SEC', 1))
        hb = int(app.config.get('TIMER_HEARTBEAT_SEC', 0) or 0)
        ticks = 0
        while True:
            socketio.sleep(interval)
            if not self.is_current(identity, generation) or controller.generation != generation:
                app.logger.info(f"[timer-abort] session={identity} generation={generation} superseded")
                return
            if not controller.tick(generation):
                # Reset, restarted or ended by the puzzles-complete path since the last wake-up
                self._release(identity, generation)
                return
            ticks += 1
            snapshot = controller.snapshot()
            socketio.emit('tick', snapshot, to=session_room(identity), namespace='/ws')
            if hb > 0 and ticks % hb == 0:
                app.logger.info(f"[timer-heartbeat] session={identity} remaining={controller.remaining_seconds}s")
            if controller.ended:
                app.logger.info(f"[timer-expired] session={identity} user={controller.participant_name}")
                socketio.emit('session_ended', {
                    'reason': controller.end_reason,
                    'elapsed': controller.elapsed_formatted(),
                    'redirect': controller.redirect or '/',
                }, to=session_room(identity), namespace='/ws')
                self._release(identity, generation)
                return

    def _release(self, identity: str, generation: int) -> None:
        with self._lock:
            if self._active.get(identity) == generation:
                self._active.pop(identity, None)


scheduler = TickScheduler()
