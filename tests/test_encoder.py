from statsd_sdk.encoder import encode, encode_sample, format_rate, format_value, normalize_prefix
from statsd_sdk.metric import MetricKind, MetricSample


def test_encode_without_prefix():
    assert encode('foo', 1, 'c', 1.0) == b'foo:1|c|@1.000000'


def test_encode_with_prefix():
    assert encode('foo', 1, 'c', 1.0, prefix='app') == b'app.foo:1|c|@1.000000'


def test_prefix_trailing_dots_are_stripped():
    assert normalize_prefix('app.') == 'app'
    assert encode('foo', 2, 'g', 1.0, prefix='app..') == b'app.foo:2|g|@1.000000'


def test_empty_prefix_is_omitted():
    assert encode('foo', 2, 'g', 1.0, prefix='') == b'foo:2|g|@1.000000'
    assert encode('foo', 2, 'g', 1.0, prefix=None) == b'foo:2|g|@1.000000'


def test_sample_rate_has_six_decimals():
    assert encode('foo', 1, 'c', 0.5) == b'foo:1|c|@0.500000'
    assert encode('foo', 1, 'c', 0.125) == b'foo:1|c|@0.125000'


def test_integer_and_float_values_keep_their_form():
    assert format_value(5) == '5'
    assert format_value(-5) == '-5'
    assert format_value(3.25) == '3.25'
    assert format_value(2.0) == '2.0'
    assert format_value(True) == '1'


def test_encode_timer():
    assert encode('req', 1500, 'ms', 1.0) == b'req:1500|ms|@1.000000'


def test_encode_sample_uses_kind_type_code():
    sample = MetricSample('temp', -1.5, MetricKind.FLOAT_GAUGE, 0.1)
    assert encode_sample(sample, 'svc') == b'svc.temp:-1.5|g|@0.100000'


def test_tiny_sample_rate_keeps_its_precision():
    assert format_rate(1e-7) == '0.0000001'
    assert encode('foo', 1, 'c', 0.0000001) == b'foo:1|c|@0.0000001'


def test_sample_rate_beyond_six_decimals_is_not_rounded():
    assert format_rate(0.1234567) == '0.1234567'
    assert float(format_rate(0.1234567)) == 0.1234567
