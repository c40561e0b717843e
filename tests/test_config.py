from statsd_sdk.config import StatsdConfig


def test_zero_sample_rate_means_default():
    assert StatsdConfig(sample_rate=0).sample_rate == 1.0


def test_explicit_sample_rate_is_kept():
    assert StatsdConfig(sample_rate=0.25).sample_rate == 0.25


def test_out_of_range_rate_is_not_validated_here():
    assert StatsdConfig(sample_rate=2).sample_rate == 2


def test_address():
    assert StatsdConfig(host='stats.local', port=9125).address == 'stats.local:9125'


def test_from_env(monkeypatch):
    monkeypatch.setenv('STATSD_HOST', 'stats.local')
    monkeypatch.setenv('STATSD_PORT', '9125')
    monkeypatch.setenv('STATSD_PROJECT', 'billing')
    monkeypatch.setenv('STATSD_ENABLE', 'false')
    monkeypatch.setenv('STATSD_SAMPLE_RATE', '0.5')
    monkeypatch.setenv('STATSD_QUEUE_SIZE', '16')

    cfg = StatsdConfig.from_env()

    assert cfg.address == 'stats.local:9125'
    assert cfg.project == 'billing'
    assert cfg.enable is False
    assert cfg.sample_rate == 0.5
    assert cfg.queue_size == 16


def test_from_env_defaults(monkeypatch):
    for name in ('STATSD_HOST', 'STATSD_PORT', 'STATSD_ENABLE', 'STATSD_SAMPLE_RATE'):
        monkeypatch.delenv(name, raising=False)

    cfg = StatsdConfig.from_env()

    assert cfg.address == '127.0.0.1:8125'
    assert cfg.enable is True
    assert cfg.sample_rate == 1.0
