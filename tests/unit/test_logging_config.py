"""
Unit Tests for Logging and Exceptions
"""
import json
import logging

from placement_tracker.exceptions import ExportError, ReportStoreError
from placement_tracker.logging_config import (
    JSONFormatter,
    TrackerLogger,
    set_reporter,
    setup_logging,
)


class TestSetupLogging:
    """Test logger configuration"""

    def test_logger_class_and_handlers(self, tmp_path):
        """Test the tracker logger writes to the rotating file"""
        log_file = tmp_path / 'logs' / 'tracker.log'

        logger = setup_logging(level='INFO', log_file=str(log_file), json_logs=False)
        set_reporter('priya')
        logger.info('hello file')
        for handler in logger.handlers:
            handler.flush()

        assert isinstance(logger, TrackerLogger)
        assert not logger.propagate
        content = log_file.read_text()
        assert 'hello file' in content
        assert '[priya]' in content

        set_reporter('')
        setup_logging()

    def test_json_formatter(self):
        """Test structured output carries extra fields"""
        record = logging.LogRecord('placement_tracker', logging.INFO, __file__, 1, 'GET done', None, None)
        record.status_code = 200

        data = json.loads(JSONFormatter().format(record))

        assert data['message'] == 'GET done'
        assert data['level'] == 'INFO'
        assert data['status_code'] == 200


class TestExceptions:
    """Test error payloads"""

    def test_report_store_error(self):
        """Test status and payload are kept"""
        error = ReportStoreError('boom', status_code=502, payload={'error': 'boom'})

        assert error.to_dict() == {
            'code': 'REPORT_STORE_ERROR',
            'message': 'boom',
            'details': {'status_code': 502, 'payload': {'error': 'boom'}},
        }

    def test_export_error(self):
        """Test export failures have their own code"""
        assert ExportError('No reports to export').code == 'EXPORT_FAILED'
