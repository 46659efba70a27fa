"""
Unit tests for run-log forwarding.
"""

import logging
import unittest

from instancepipelines.core.schemas import Outcome, RunResult, StepRecord
from instancepipelines.logs import forward_run_log


class TestForwardRunLog(unittest.TestCase):
    def setUp(self):
        self.logger = logging.getLogger("tests.forward_run_log")

    def test_succeeded_run(self):
        result = RunResult(pipeline="install", outcome=Outcome.SUCCEEDED,
                           log=[StepRecord(processor="CreateSite", outcome=Outcome.SUCCEEDED)])
        with self.assertLogs(self.logger, level="INFO") as logs:
            forward_run_log(result, self.logger)
        self.assertEqual(len(logs.records), 2)
        self.assertIn("completed successfully", logs.output[-1])

    def test_errored_run(self):
        result = RunResult(pipeline="uninstall", outcome=Outcome.ERRORED, message="StopSite: boom",
                           failed_step="StopSite", error_type="WebServerError",
                           log=[StepRecord(processor="StopSite", outcome=Outcome.ERRORED, message="StopSite: boom")])
        with self.assertLogs(self.logger, level="INFO") as logs:
            forward_run_log(result, self.logger)
        self.assertEqual([r.levelname for r in logs.records], ["ERROR", "ERROR"])

    def test_aborted_run_is_not_an_error(self):
        result = RunResult(pipeline="install", outcome=Outcome.ABORTED, message="missing manifest",
                           log=[StepRecord(processor="ValidatePackage", outcome=Outcome.ABORTED,
                                           message="missing manifest")])
        with self.assertLogs(self.logger, level="INFO") as logs:
            forward_run_log(result, self.logger)
        self.assertNotIn("ERROR", [r.levelname for r in logs.records])


if __name__ == "__main__":
    unittest.main()
