from k3sctl.modules.summary import dns_records, render_summary


def test_summary_without_managed_dns(config):
    text = render_summary(config)
    assert "Domain Name: example.com" in text
    assert "Issuer name: gitpod-issuer" in text
    assert text.count("In cluster: true") == 3
    assert "DNS Records" not in text


def test_summary_lists_a_records(cloudflare_config):
    text = render_summary(cloudflare_config)
    assert "DNS Records" in text
    assert "example.com - 10.0.0.100" in text
    assert "*.example.com - 10.0.0.100" in text
    assert "*.ws.example.com - 10.0.0.100" in text


def test_dns_records(config):
    assert dns_records(config) == [
        ("example.com", "10.0.0.100"),
        ("*.example.com", "10.0.0.100"),
        ("*.ws.example.com", "10.0.0.100"),
    ]
