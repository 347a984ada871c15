"""
Unit tests for the record encoder, handler and formatter.
"""

import io
import json
import logging
import re
import sys
import time
import uuid
from enum import IntEnum
from pathlib import Path

import pytest

from json_env_logger.clock import epoch_millis, rfc3339_millis
from json_env_logger.encoder import (
    JSONFormatter,
    JSONHandler,
    encode,
    get_logger,
    validate_log_format,
)
from json_env_logger.record import Level, Record


def fixed_clock():
    return 1700000000123


def encode_to_str(record, time_source=fixed_clock):
    buf = io.StringIO()
    encode(buf, record, time_source)
    return buf.getvalue()


def make_log_record(msg='Test message', level=logging.INFO, **attrs):
    record = logging.LogRecord(
        name='test_logger',
        level=level,
        pathname='test.py',
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestEncode:
    """Test encode"""

    def test_exact_output(self):
        """Should write fields in order on one line"""
        record = Record(Level.INFO, 'hello', [('task_id', 567), ('thread_id', '12')])

        output = encode_to_str(record)

        assert output == '{"level":"INFO","ts":1700000000123,"msg":"hello","task_id":567,"thread_id":"12"}\n'

    def test_hello_message(self):
        """Should decode msg to the original message"""
        data = json.loads(encode_to_str(Record(Level.INFO, 'hello')))

        assert data['msg'] == 'hello'
        assert data['level'] == 'INFO'

    def test_zero_attributes_has_three_keys(self):
        """Should contain exactly level, ts and msg"""
        data = json.loads(encode_to_str(Record(Level.WARN, 'x')))

        assert list(data) == ['level', 'ts', 'msg']

    def test_attribute_order_preserved(self):
        """Should keep attributes in input order after the fixed fields"""
        pairs = [('zeta', 1), ('alpha', 'a'), ('mid', True), ('pi', 3.5)]

        data = json.loads(encode_to_str(Record(Level.DEBUG, 'm', pairs)))

        assert list(data) == ['level', 'ts', 'msg', 'zeta', 'alpha', 'mid', 'pi']
        assert len(data) == 3 + len(pairs)

    def test_message_with_quote_and_newline(self):
        """Should escape embedded quotes and newlines in msg"""
        message = 'say "hi"\nbye'

        output = encode_to_str(Record(Level.INFO, message))

        assert output.count('\n') == 1
        assert json.loads(output)['msg'] == message

    def test_key_with_quote(self):
        """Should escape keys and string values"""
        key = 'challenge "key"'
        value = 'raw "quotes" and {braces}'

        data = json.loads(encode_to_str(Record(Level.INFO, 'm', [(key, value)])))

        assert data[key] == value

    def test_scalar_values_unquoted(self):
        """Should write numbers and booleans as JSON numbers and booleans"""
        pairs = [('i', -7), ('f', 2.3), ('t', True), ('n', False), ('big', 10 ** 20)]

        output = encode_to_str(Record(Level.INFO, 'm', pairs))

        assert ',"i":-7,"f":2.3,"t":true,"n":false,"big":100000000000000000000}' in output

    def test_huge_int_value(self):
        """Should write integers past the str conversion limit as full decimal numbers"""
        pairs = [('big', 10 ** 5000), ('neg', -(10 ** 5000 + 7))]

        output = encode_to_str(Record(Level.INFO, 'm', pairs))

        big = '1' + '0' * 5000
        neg = '-1' + '0' * 4999 + '7'
        assert output.endswith(f',"big":{big},"neg":{neg}}}\n')

    def test_int_enum_value(self):
        """Should write int subclasses by their integer value"""
        class Color(IntEnum):
            RED = 1

        output = encode_to_str(Record(Level.INFO, 'm', [('color', Color.RED)]))

        assert output.endswith(',"color":1}\n')

    def test_non_finite_float_is_quoted(self):
        """Should keep the line valid JSON for nan and inf"""
        pairs = [('a', float('nan')), ('b', float('inf')), ('c', float('-inf'))]

        data = json.loads(encode_to_str(Record(Level.INFO, 'm', pairs)))

        assert data['a'] == 'nan'
        assert data['b'] == 'inf'
        assert data['c'] == '-inf'

    def test_opaque_value_is_escaped(self):
        """Should render other objects via str() as escaped strings"""
        class Thing:
            def __str__(self):
                return 'thing "with" quotes'

        data = json.loads(encode_to_str(Record(Level.INFO, 'm', [('obj', Thing()), ('none', None)])))

        assert data['obj'] == 'thing "with" quotes'
        assert data['none'] == 'None'

    def test_duplicate_keys_passed_through(self):
        """Should write duplicate keys as given"""
        output = encode_to_str(Record(Level.INFO, 'm', [('k', 1), ('k', 2)]))

        assert output.endswith(',"k":1,"k":2}\n')

    def test_non_string_key(self):
        """Should write non-string keys via str()"""
        output = encode_to_str(Record(Level.INFO, 'm', [(7, 'seven')]))

        assert output.endswith(',"7":"seven"}\n')

    def test_generator_attributes(self):
        """Should consume attributes from a generator"""
        pairs = ((f'k{i}', i) for i in range(3))

        data = json.loads(encode_to_str(Record(Level.INFO, 'm', pairs)))

        assert [data['k0'], data['k1'], data['k2']] == [0, 1, 2]

    @pytest.mark.parametrize('level', list(Level))
    def test_level_names(self, level):
        """Should write every level by its name"""
        data = json.loads(encode_to_str(Record(level, 'm')))

        assert data['level'] == level.name

    def test_epoch_timestamp(self):
        """Should write an unquoted integer close to wall-clock time"""
        before = int(time.time() * 1000)
        data = json.loads(encode_to_str(Record(Level.INFO, 'm'), epoch_millis))
        after = int(time.time() * 1000)

        assert isinstance(data['ts'], int)
        assert before - 1 <= data['ts'] <= after + 1

    def test_iso_timestamp(self):
        """Should write a quoted RFC 3339 string with milliseconds"""
        output = encode_to_str(Record(Level.INFO, 'm'), rfc3339_millis)

        ts = json.loads(output)['ts']
        assert re.fullmatch(r'\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z', ts)

    def test_deterministic(self):
        """Should produce identical output for equal records on different streams"""
        first = encode_to_str(Record(Level.ERROR, 'same', [('a', 1)]))
        second = encode_to_str(Record(Level.ERROR, 'same', [('a', 1)]))

        assert first == second

    def test_does_not_flush(self):
        """Should leave flushing to the caller"""
        class Stream(io.StringIO):
            flushed = False

            def flush(self):
                self.flushed = True

        stream = Stream()
        encode(stream, Record(Level.INFO, 'm'), fixed_clock)

        assert stream.flushed is False

    def test_write_error_propagates(self):
        """Should propagate a write failure part way through the line"""
        class FailingStream:
            def __init__(self, fail_after):
                self.writes = []
                self.fail_after = fail_after

            def write(self, s):
                if len(self.writes) >= self.fail_after:
                    raise OSError('broken pipe')
                self.writes.append(s)

        stream = FailingStream(fail_after=4)

        with pytest.raises(OSError, match='broken pipe'):
            encode(stream, Record(Level.INFO, 'hello', [('a', 1)]), fixed_clock)

        assert stream.writes


class TestRecordFromLogRecord:
    """Test Record.from_log_record"""

    def test_context_mapping(self):
        """Should take attributes from the context mapping"""
        record = make_log_record('User action', context={'user_id': 123, 'action': 'login'})

        data = json.loads(encode_to_str(Record.from_log_record(record)))

        assert data['user_id'] == 123
        assert data['action'] == 'login'

    def test_context_pairs(self):
        """Should accept a sequence of pairs with duplicate keys"""
        record = make_log_record(context=[('k', 1), ('k', 2)])

        output = encode_to_str(Record.from_log_record(record))

        assert output.endswith(',"k":1,"k":2}\n')

    def test_levels_mapped(self):
        """Should map WARNING to WARN and CRITICAL to ERROR"""
        assert Record.from_log_record(make_log_record(level=logging.WARNING)).level is Level.WARN
        assert Record.from_log_record(make_log_record(level=logging.CRITICAL)).level is Level.ERROR
        assert Record.from_log_record(make_log_record(level=5)).level is Level.TRACE

    def test_message_args(self):
        """Should render the message with its arguments"""
        record = logging.LogRecord('n', logging.INFO, 'p.py', 1, 'hello %s', ('world',), None)

        assert Record.from_log_record(record).message == 'hello world'

    def test_exception_attribute(self):
        """Should append the formatted traceback after the context"""
        try:
            raise ValueError('Test error')
        except ValueError:
            exc_info = sys.exc_info()

        record = make_log_record('Error occurred', level=logging.ERROR, exc_info=exc_info,
                                 context={'request_id': 'req-456'})

        data = json.loads(encode_to_str(Record.from_log_record(record)))

        assert list(data) == ['level', 'ts', 'msg', 'request_id', 'exception']
        assert 'ValueError: Test error' in data['exception']
        assert data['exception'].startswith('Traceback')


class TestJSONHandler:
    """Test JSONHandler"""

    def _logger(self, handler):
        logger = logging.getLogger(f'test_handler_{uuid.uuid4().hex[:8]}')
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.addHandler(handler)
        return logger

    def test_emit_writes_line(self):
        """Should write one JSON line per record"""
        stream = io.StringIO()
        logger = self._logger(JSONHandler(stream, time_source=fixed_clock))

        logger.info('hello')
        logger.warning('careful', extra={'context': {'n': 1}})

        lines = stream.getvalue().splitlines()
        assert lines == [
            '{"level":"INFO","ts":1700000000123,"msg":"hello"}',
            '{"level":"WARN","ts":1700000000123,"msg":"careful","n":1}',
        ]

    def test_write_error_goes_to_handle_error(self, monkeypatch):
        """Should hand write failures to logging's error handling"""
        class Broken:
            def write(self, s):
                raise OSError('closed')

            def flush(self):
                pass

        handler = JSONHandler(Broken())
        errors = []
        monkeypatch.setattr(handler, 'handleError', errors.append)
        logger = self._logger(handler)

        logger.error('lost')

        assert len(errors) == 1
        assert errors[0].getMessage() == 'lost'


class TestJSONFormatter:
    """Test JSONFormatter"""

    def test_format_basic_log(self):
        """Should format log as JSON without a trailing newline"""
        formatter = JSONFormatter(time_source=fixed_clock)

        output = formatter.format(make_log_record())

        assert output == '{"level":"INFO","ts":1700000000123,"msg":"Test message"}'


class TestGetLogger:
    """Test get_logger function"""

    def test_get_logger_returns_logger(self):
        """Should return configured logger instance"""
        logger = get_logger('test_app')

        assert isinstance(logger, logging.Logger)
        assert logger.name == 'test_app'
        assert logger.level == logging.INFO
        assert any(isinstance(h, JSONHandler) for h in logger.handlers)

    def test_get_logger_with_custom_level(self):
        """Should set custom log level"""
        logger = get_logger('test_app_debug', level=logging.DEBUG)

        assert logger.level == logging.DEBUG

    def test_get_logger_with_file(self, tmp_path):
        """Should write JSON lines to log file"""
        log_file = str(tmp_path / 'app.log')
        logger_name = f'test_file_{uuid.uuid4().hex[:8]}'

        logger = get_logger(logger_name, log_file=log_file)
        logger.info('File log message', extra={'context': {'user_id': 456}})

        for handler in logger.handlers:
            handler.flush()
            if isinstance(handler, logging.FileHandler):
                handler.close()

        content = Path(log_file).read_text()
        assert content.endswith('\n')

        data = json.loads(content.strip())
        assert data['msg'] == 'File log message'
        assert data['user_id'] == 456

    def test_get_logger_no_duplicate_handlers(self):
        """Should not add duplicate handlers"""
        logger1 = get_logger('test_app_dup')
        handlers_count1 = len(logger1.handlers)

        logger2 = get_logger('test_app_dup')
        handlers_count2 = len(logger2.handlers)

        assert logger1 is logger2
        assert handlers_count1 == handlers_count2

    def test_get_logger_plain_text(self):
        """Should support plain text format"""
        logger = get_logger(f'test_plain_{uuid.uuid4().hex[:8]}', use_json=False)

        handler = logger.handlers[0]
        assert not isinstance(handler, JSONHandler)
        assert '%(levelname)s' in handler.formatter._fmt


class TestValidateLogFormat:
    """Test validate_log_format function"""

    def test_validate_encoded_line(self):
        """Should accept encoder output"""
        line = encode_to_str(Record(Level.INFO, 'm', [('a', 1)]))

        assert validate_log_format(line) is True

    def test_validate_iso_timestamp(self):
        """Should accept string timestamps"""
        line = json.dumps({'level': 'ERROR', 'ts': '2026-10-18T20:30:00.123Z', 'msg': 'x'})

        assert validate_log_format(line) is True

    def test_validate_missing_required_field(self):
        """Should reject logs missing required fields"""
        line = json.dumps({'level': 'INFO', 'ts': 1})

        assert validate_log_format(line) is False

    def test_validate_invalid_level(self):
        """Should reject logs with invalid level"""
        line = json.dumps({'level': 'WARNING', 'ts': 1, 'msg': 'm'})

        assert validate_log_format(line) is False

    @pytest.mark.parametrize('level', [[], {}, 3, None])
    def test_validate_non_string_level(self, level):
        """Should reject a level that is not a string"""
        line = json.dumps({'level': level, 'ts': 1, 'msg': 'm'})

        assert validate_log_format(line) is False

    def test_validate_bad_timestamp(self):
        """Should reject non-integer, non-string timestamps"""
        assert validate_log_format(json.dumps({'level': 'INFO', 'ts': 1.5, 'msg': 'm'})) is False
        assert validate_log_format(json.dumps({'level': 'INFO', 'ts': True, 'msg': 'm'})) is False

    def test_validate_not_json(self):
        """Should reject non-JSON strings"""
        assert validate_log_format('Plain text log entry') is False
        assert validate_log_format('[1, 2]') is False
