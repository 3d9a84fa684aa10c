"""Debug session lifecycle and the public debugging operations."""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from debugmcp.components.browser import BrowserAutomation
from debugmcp.components.debugging.diagnostics import DiagnosticsSink
from debugmcp.components.debugging.errors import (
    DebugError,
    InvalidArgument,
    InvalidStepSource,
    SessionNotActive,
    UnknownStepType,
    error_payload,
)
from debugmcp.components.debugging.execution_controller import ExecutionController
from debugmcp.components.debugging.step_source import (
    StepSource,
    decode_step_source,
    persist_step_source,
)
from debugmcp.models.config_models import DebugConfig
from debugmcp.models.session_models import DebugSession, RunReport, RunState
from debugmcp.utils.validation import InputValidator, StepValidator

logger = logging.getLogger(__name__)


class DebugSessionManager:
    """Owns the single active debug session and exposes the debug operations.

    The manager is the context object every operation goes through; nothing
    else holds the session. The browser behind the automation collaborator is
    shared with any other user of that collaborator.
    """

    def __init__(self, config: Optional[DebugConfig] = None, automation: Optional[Any] = None):
        self.config = config or DebugConfig()
        self.automation = automation if automation is not None else BrowserAutomation(self.config)
        self.controller = ExecutionController(self.automation, self.config)
        self.session: Optional[DebugSession] = None

    def _require_session(self) -> DebugSession:
        if self.session is None or not self.session.active:
            raise SessionNotActive()
        return self.session

    def _diagnostics(self, session: DebugSession) -> DiagnosticsSink:
        return DiagnosticsSink(session, self.automation, self.config)

    async def _release_browser(self) -> None:
        try:
            await self.automation.close()
        except Exception as e:
            logger.warning(f"Failed to release browser resource: {e}")
        if self.session is not None:
            self.session.browser_ready = False

    # ------------------------------------------------------------------
    # Core operations (raise DebugError)
    # ------------------------------------------------------------------

    async def create_or_update(
        self,
        test_name: str,
        step_source: Optional[StepSource] = None,
        break_at: Optional[List[str]] = None,
        clear_previous: bool = False,
    ) -> str:
        """
        Start a new session or update the active one.

        A different ``test_name`` or ``clear_previous`` tears the current
        session down first. Otherwise only the breakpoints change. A supplied
        step source replaces the step list.

        Returns:
            str: Human-readable step and breakpoint summary.
        """
        ok, error = InputValidator.validate_test_name(test_name)
        if not ok:
            raise InvalidArgument(error)
        ok, error = InputValidator.validate_breakpoints(break_at)
        if not ok:
            raise InvalidArgument(error)

        # Decode first so a bad source leaves the current session untouched
        steps = decode_step_source(step_source) if step_source is not None else None

        session = self.session
        if session is None or session.name != test_name or clear_previous:
            if session is not None:
                logger.info(f'Tearing down debug session "{session.name}"')
                await self._release_browser()
                session.reset()
            session = DebugSession(name=test_name)
            self.session = session
            logger.info(f'Created debug session "{test_name}"')

        session.set_breakpoints(break_at)

        if steps is not None:
            session.steps.replace_all(steps)
            session.current_index = -1
            session.paused = False
            session.state = RunState.IDLE
            if self.config.PERSIST_STEP_SOURCE:
                self._persist(session)

        breakpoints = session.breakpoints
        return (
            f'Debug test "{test_name}" prepared with {len(session.steps)} steps.\n'
            + (
                f"Breakpoints set at: {', '.join(breakpoints)}"
                if breakpoints
                else "No breakpoints set."
            )
            + "\nUse run_debug_test to execute."
        )

    def _persist(self, session: DebugSession) -> None:
        try:
            path = persist_step_source(list(session.steps), self.config.debug_dir, session.name)
            logger.info(f"Debug test saved to {path} with {len(session.steps)} steps")
        except OSError as e:
            logger.warning(f'Could not persist steps of "{session.name}": {e}')

    async def modify_step(
        self,
        step_id: str,
        step_type: str,
        params: Optional[Dict[str, Any]] = None,
        index: Optional[int] = None,
        run_after: bool = False,
    ) -> Tuple[str, Optional[RunReport]]:
        """
        Update a step in place or insert a new one.

        Args:
            step_id: Step to update; a new step is created when it is unknown.
            step_type: Step type to store.
            params: Step parameters.
            index: Insert position for new steps; out-of-range values append.
            run_after: Run just this step right after the change. A breakpoint
                on the step pauses the run before it.

        Returns:
            tuple: (message, run report or None)
        """
        session = self._require_session()
        params = params if params is not None else {}

        ok, error = StepValidator.validate_step_id(step_id)
        if not ok:
            raise InvalidStepSource([error])
        ok, _ = StepValidator.validate_step_type(step_type)
        if not ok:
            raise UnknownStepType(step_type)
        problems = StepValidator.validate_params(step_type, params)
        if problems:
            raise InvalidStepSource(problems)

        position, created = session.steps.upsert(step_id, step_type, params, index)
        diagnostics = self._diagnostics(session)
        if created:
            # Keep the pause position on the step it was paused before
            if session.paused and position < session.current_index:
                session.current_index += 1
            diagnostics.log(f"Added step {step_id} at index {position}")
            message = f"Step {step_id} added successfully."
        else:
            diagnostics.log(f"Updated step {step_id} at index {position}")
            message = f"Step {step_id} updated successfully."
        session.update_activity()

        if not run_after:
            return message, None

        report = await self.controller.run(
            session,
            session.name,
            from_step=position,
            to_step=position,
            run_to_breakpoint=True,
        )
        return message, report

    async def cleanup(self) -> None:
        """Release the browser and reset the session; repeat calls are no-ops."""
        await self._release_browser()
        if self.session is not None:
            logger.info(f'Cleaning up debug session "{self.session.name}"')
            self.session.reset()
        self.session = None

    # ------------------------------------------------------------------
    # Public operations (return tool payloads, never raise)
    # ------------------------------------------------------------------

    def _failure(self, error: Exception) -> Dict[str, Any]:
        session = self.session
        if not isinstance(error, DebugError):
            logger.error(f"Unexpected debug engine error: {error}", exc_info=True)
        return error_payload(
            error,
            logs=session.logs if session else None,
            screenshots=session.screenshots if session else None,
        )

    def _run_payload(self, report: RunReport) -> Dict[str, Any]:
        payload = report.to_dict()
        session = self.session
        current = None
        if session is not None and 0 <= report.current_index < len(session.steps):
            current = session.steps[report.current_index].to_dict()
        payload["current_step"] = current

        name = report.test_name
        if report.failed:
            if report.failed_index is None:
                payload["message"] = f'Debug test "{name}" could not start:\n{report.error}'
            else:
                step_type = current["type"] if current else "unknown"
                payload["message"] = (
                    f'Debug test "{name}" failed at step {report.failed_index} '
                    f"({step_type}):\n{report.error}"
                )
        elif report.paused:
            payload["message"] = (
                f'Debug test "{name}" paused at step {report.current_index}.\n'
                f"Current step: {json.dumps(current, default=str)}"
            )
        else:
            payload["message"] = f'Debug test "{name}" completed successfully.'
        return payload

    async def debug_test(
        self,
        test_name: str,
        step_source: Optional[StepSource] = None,
        run_immediately: bool = False,
        break_at: Optional[List[str]] = None,
        clear_previous: bool = False,
    ) -> Dict[str, Any]:
        try:
            summary = await self.create_or_update(test_name, step_source, break_at, clear_previous)
            session = self.session
            if run_immediately and session.steps:
                report = await self.controller.run(session, test_name)
                payload = self._run_payload(report)
                payload["prepared"] = summary
                return payload
            return {
                "success": True,
                "test_name": test_name,
                "step_count": len(session.steps),
                "breakpoints": list(session.breakpoints),
                "message": summary,
            }
        except Exception as e:
            logger.error(f"Error in debug_test: {e}")
            return self._failure(e)

    async def run_debug_test(
        self,
        test_name: str,
        from_step: int = 0,
        to_step: int = -1,
        run_to_breakpoint: bool = True,
    ) -> Dict[str, Any]:
        try:
            report = await self.controller.run(
                self.session, test_name, from_step, to_step, run_to_breakpoint
            )
            return self._run_payload(report)
        except Exception as e:
            logger.error(f"Error in run_debug_test: {e}")
            return self._failure(e)

    async def continue_debug_test(
        self, steps: int = -1, run_to_breakpoint: bool = True
    ) -> Dict[str, Any]:
        try:
            report = await self.controller.continue_run(self.session, steps, run_to_breakpoint)
            return self._run_payload(report)
        except Exception as e:
            logger.error(f"Error in continue_debug_test: {e}")
            return self._failure(e)

    async def modify_debug_step(
        self,
        step_id: str,
        step_type: str,
        params: Optional[Dict[str, Any]] = None,
        index: Optional[int] = None,
        run_after: bool = False,
    ) -> Dict[str, Any]:
        try:
            message, report = await self.modify_step(step_id, step_type, params, index, run_after)
            if report is not None:
                payload = self._run_payload(report)
                payload["modified"] = message
                return payload
            session = self.session
            return {
                "success": True,
                "message": message,
                "step_index": session.steps.index_of(step_id),
                "step_count": len(session.steps),
            }
        except Exception as e:
            logger.error(f"Error in modify_debug_step: {e}")
            return self._failure(e)

    async def get_debug_state(self, include_step_results: bool = True) -> Dict[str, Any]:
        try:
            session = self._require_session()
            if self.config.CAPTURE_STATE_SCREENSHOT and session.browser_ready:
                await self._diagnostics(session).capture("current_state")
            payload = {"success": True}
            payload.update(session.snapshot(include_step_results=include_step_results))
            return payload
        except Exception as e:
            logger.error(f"Error in get_debug_state: {e}")
            return self._failure(e)

    async def cleanup_debug_session(self) -> Dict[str, Any]:
        try:
            await self.cleanup()
            return {"success": True, "message": "Debug session cleaned up successfully."}
        except Exception as e:
            logger.error(f"Error in cleanup_debug_session: {e}")
            return self._failure(e)
