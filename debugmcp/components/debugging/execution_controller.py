"""Resumable step execution with breakpoints."""

import asyncio
import logging
from typing import Any, Dict, Optional

from debugmcp.components.debugging.assertion_evaluator import AssertionEvaluator
from debugmcp.components.debugging.diagnostics import DiagnosticsSink
from debugmcp.components.debugging.errors import (
    AssertionFailure,
    InvalidStepRange,
    NoStepsDefined,
    NotPaused,
    SessionNotActive,
    UnknownSession,
    UnknownStepType,
    UnsupportedStepType,
    error_from_result,
)
from debugmcp.models.config_models import DebugConfig
from debugmcp.models.session_models import DebugSession, RunReport, RunState
from debugmcp.models.step_models import DebugStep

logger = logging.getLogger(__name__)


class ExecutionController:
    """
    State machine driving a session's steps.

    A run moves the session from idle (or any earlier outcome) to running and
    ends paused, completed or failed. Breakpoints are checked before a step
    runs, so the step a run pauses at stays pending. The first failing step
    ends the run; nothing is retried.
    """

    def __init__(self, automation: Any, config: Optional[DebugConfig] = None):
        self.automation = automation
        self.config = config or DebugConfig()

    @staticmethod
    def validate(session: Optional[DebugSession], test_name: str) -> None:
        """Check that ``test_name`` names the active session and it has steps."""
        if session is None or not session.active:
            raise SessionNotActive()
        if test_name != session.name:
            raise UnknownSession(test_name, session.name)
        if not session.steps:
            raise NoStepsDefined(test_name)

    async def run(
        self,
        session: Optional[DebugSession],
        test_name: str,
        from_step: int = 0,
        to_step: int = -1,
        run_to_breakpoint: bool = True,
        resume: bool = False,
    ) -> RunReport:
        """
        Run the steps ``from_step..to_step`` of the active session.

        Args:
            session: The session owned by the session manager.
            test_name: Name the caller expects the active session to have.
            from_step: First step index to run (negative values mean 0).
            to_step: Last step index to run; negative means the last step.
            run_to_breakpoint: Pause before steps whose id is a breakpoint.
            resume: Skip the breakpoint check for ``from_step``; used when
                continuing from the step the session paused before.

        Returns:
            RunReport: Position, pause flag, state, logs and screenshots. A
            failed step is reported in the returned value, not raised.

        Raises:
            SessionNotActive, UnknownSession, NoStepsDefined, InvalidStepRange:
                Raised before any state is touched.
        """
        self.validate(session, test_name)
        steps = session.steps
        last = steps.last_index
        start = max(0, from_step)
        end = last if to_step is None or to_step < 0 else min(to_step, last)
        if start > last:
            raise InvalidStepRange(
                f"Step {start} does not exist; debug test \"{test_name}\" has {len(steps)} steps."
            )
        if start > end:
            raise InvalidStepRange(f"Start step {start} is after end step {end}.")

        diagnostics = DiagnosticsSink(session, self.automation, self.config)
        diagnostics.reset_logs()
        session.current_index = start
        session.paused = False
        session.state = RunState.RUNNING
        session.last_error = None
        session.update_activity()
        steps.reset_range(start, end)

        if not session.browser_ready:
            diagnostics.log(f'Initializing browser for debug test "{test_name}"...')
            opened = await self.automation.ensure_page()
            if not opened.get("success"):
                error = error_from_result(opened)
                session.state = RunState.FAILED
                session.last_error = str(error)
                diagnostics.log(f"Browser initialization failed: {error}")
                return self._report(session, error=error)
            session.browser_ready = True
            diagnostics.log("Browser initialized")

        diagnostics.log(f'Running debug test "{test_name}" from step {start} to {end}')

        for i in range(start, end + 1):
            session.current_index = i
            step = steps[i]

            if (
                run_to_breakpoint
                and session.has_breakpoint(step.step_id)
                and not (resume and i == start)
            ):
                session.paused = True
                session.state = RunState.PAUSED
                diagnostics.log(f"Paused at breakpoint: {step.step_id}")
                await diagnostics.capture(f"breakpoint_{step.step_id}")
                return self._report(session)

            try:
                step.mark_running()
                diagnostics.log(f"Executing step {i}: {step.step_type} ({step.step_id})")
                result = await self._execute_step(step, diagnostics)
                step.mark_completed(result)
                diagnostics.log(f"Step {i} completed successfully")
            except Exception as e:
                step.mark_failed(str(e))
                session.state = RunState.FAILED
                session.last_error = str(e)
                diagnostics.log(f"Step {i} failed: {e}")
                screenshot = await diagnostics.capture(f"error_step_{i}")
                if screenshot:
                    step.screenshot_ref = screenshot
                return self._report(session, error=e, failed_index=i)

        await diagnostics.capture("final")
        session.state = RunState.COMPLETED
        diagnostics.log(f'Debug test "{test_name}" completed successfully')
        return self._report(session)

    async def continue_run(
        self,
        session: Optional[DebugSession],
        steps: int = -1,
        run_to_breakpoint: bool = True,
    ) -> RunReport:
        """Resume a paused session at the step it paused before.

        Args:
            session: The active session.
            steps: Number of steps to run; zero or negative runs to the end.
            run_to_breakpoint: Pause again at the next breakpoint.
        """
        if session is None or not session.active:
            raise SessionNotActive()
        if not session.paused:
            raise NotPaused()

        from_step = session.current_index
        to_step = from_step + steps - 1 if steps > 0 else -1
        session.paused = False
        return await self.run(
            session,
            session.name,
            from_step=from_step,
            to_step=to_step,
            run_to_breakpoint=run_to_breakpoint,
            resume=True,
        )

    async def _execute_step(self, step: DebugStep, diagnostics: DiagnosticsSink) -> Any:
        params = step.params
        step_type = step.step_type

        if step_type == "navigate":
            return self._checked(await self.automation.navigate(params["url"]))

        if step_type == "click":
            selector = params["selector"]
            return self._checked(await self.automation.click(selector), selector)

        if step_type == "type":
            selector = params["selector"]
            result = await self.automation.type(
                selector, params["text"], clear_first=params.get("clearFirst", False)
            )
            return self._checked(result, selector)

        if step_type == "extract":
            selector = params["selector"]
            result = await self.automation.extract(
                selector, params.get("attribute", "textContent")
            )
            return self._checked(result, selector)

        if step_type == "screenshot":
            result = self._checked(
                await diagnostics.take_screenshot(
                    f"step_{step.step_id}", full_page=params.get("fullPage", False)
                )
            )
            step.screenshot_ref = result["name"]
            return result

        if step_type == "wait":
            ms = params.get("ms", self.config.DEFAULT_WAIT_MS)
            await asyncio.sleep(ms / 1000)
            return {"waited": ms}

        if step_type == "assert":
            assertion = params["assertion"]
            evaluator = AssertionEvaluator(self.automation, warn=diagnostics.log)
            outcome = await evaluator.evaluate(assertion)
            if not outcome.passed:
                raise AssertionFailure(
                    f"Assertion failed: {params.get('message') or assertion} "
                    f"(expected {outcome.expected!r}, got {outcome.actual!r})"
                )
            return outcome.to_dict()

        if step_type == "execute":
            raise UnsupportedStepType(
                "execute", "no sandboxed JavaScript evaluator is available"
            )

        raise UnknownStepType(step_type)

    @staticmethod
    def _checked(result: Dict[str, Any], selector: str = "") -> Dict[str, Any]:
        if not result.get("success"):
            raise error_from_result(result, default_selector=selector)
        return result

    @staticmethod
    def _report(
        session: DebugSession,
        error: Optional[Exception] = None,
        failed_index: Optional[int] = None,
    ) -> RunReport:
        report = RunReport(
            test_name=session.name,
            current_index=session.current_index,
            paused=session.paused,
            state=session.state,
            logs=list(session.logs),
            screenshots=list(session.screenshots),
        )
        if error is not None:
            report.failed_index = failed_index
            report.error = str(error)
            report.error_type = getattr(error, "error_type", type(error).__name__)
        return report
