from __future__ import annotations

import datetime as dt

from secarweather.report import Report, build_report, format_check_time, highlight, render
from secarweather.tropical import TropicalOutlook

from .conftest import NOW


def test_highlight_wraps_each_marker():
    out = highlight("Flood WATCHES and Heat ADVISORIES with cloud-to-ground lightning.")
    assert '<span class="watch">WATCHES</span>' in out
    assert '<span class="advisory">ADVISORIES</span>' in out
    assert "<strong>cloud-to-ground lightning</strong>" in out


def test_frequent_lightning_wrapped_once_next_to_warnings():
    out = highlight("Active Tornado Warning WARNINGS frequent lightning expected.")
    assert out.count("<strong>frequent lightning</strong>") == 1
    assert out.count("<strong>") == 1
    assert out.count('<span class="warning">WARNINGS</span>') == 1
    assert "<strong><strong>" not in out


def test_highlight_wraps_repeated_phrases():
    out = highlight("dangerous lightning, dangerous lightning")
    assert out == "<strong>dangerous lightning</strong>, <strong>dangerous lightning</strong>"


def test_build_report_labels_in_eastern_time():
    rep = build_report(NOW, None, [], "America/New_York")
    assert rep.check_time_label == "12:05 PM EDT"
    assert rep.date_range_label == "Saturday, July 4, 2026 – Wednesday, July 8, 2026"


def test_check_time_uses_standard_time_in_winter():
    winter = dt.datetime(2026, 1, 15, 23, 30, tzinfo=dt.timezone.utc)
    rep = build_report(winter, None, [], "America/New_York")
    assert rep.check_time_label == "6:30 PM EST"
    assert rep.date_range_label.startswith("Thursday, January 15, 2026")


def test_format_check_time_midnight():
    assert format_check_time(dt.datetime(2026, 3, 1, 0, 7)) == "12:07 AM local"


def test_render_layout_and_order():
    rep = Report(
        check_time_label="12:05 PM EDT",
        date_range_label="Saturday, July 4, 2026 – Wednesday, July 8, 2026",
        tropical=TropicalOutlook(outlook="Quiet tropics.", formation_chance="10%"),
        summaries=[
            ("Tennessee", "Heat Advisory ADVISORIES in effect. "),
            ("Florida", "Storms with frequent lightning. "),
        ],
    )
    html = render(rep)

    assert "Weather.gov map checked at 12:05 PM EDT." in html
    assert '<div class="date-range">Saturday, July 4, 2026 – Wednesday, July 8, 2026</div>' in html
    assert "<p>Quiet tropics.</p>" in html
    assert '<span class="formation-percentage">10%</span>' in html
    assert html.index("Tennessee:") < html.index("Florida:")
    assert html.index("Tropical Weather Outlook") < html.index("Tennessee:")
    assert html.index("Florida:") < html.index("Recommendations") < html.index("Sources: NWS local offices")
    assert '<span class="state-conditions">Heat Advisory <span class="advisory">ADVISORIES</span> in effect. </span>' in html
    assert html.count("<div") == html.count("</div>")


def test_render_without_tropical_outlook():
    html = render(Report("1:00 PM EDT", "x", None, []))
    assert "<p>Tropical outlook not available.</p>" in html
    assert '<span class="formation-percentage">N/A</span>' in html
    assert "state-report" not in html
