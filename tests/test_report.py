#! /usr/bin/env python3

import pytest

from wir.parser_helpers.worklist import Section
from wir.report import *

INFOBOX = "{{Infobox medical condition\n| name = %s\n| image = %s.png\n}}"

class test_process_section:
    def test_buckets(self, wiki, connection):
        wiki.pages["With infobox"] = INFOBOX % ("A", "A")
        wiki.pages["With file"] = "Text\n[[File:B.png|thumb]]"
        wiki.pages["No image 1"] = "Just text."
        wiki.pages["No image 2"] = "{{Infobox\n| caption = none\n}}"
        wiki.pages["Slow"] = "Just text."
        wiki.timeouts.add("Slow")
        titles = ["No image 2", "With infobox", "Slow", "Missing", "With file", "No image 1"]

        result = process_section(connection, titles)

        assert result == SectionResult(no_image=["No image 2", "No image 1"], timed_out=["Slow"])
        # every title is attempted exactly once, in the given order
        assert wiki.requested == titles

    def test_timeout_is_never_classified(self, wiki, connection):
        wiki.pages["Slow"] = "Just text without an image."
        wiki.timeouts.add("Slow")
        result = process_section(connection, ["Slow"])
        assert result.no_image == []
        assert result.timed_out == ["Slow"]

    def test_failed_requests_are_skipped(self, wiki, connection):
        wiki.pages["Broken"] = "Just text."
        wiki.errors["Broken"] = 500
        wiki.pages["Plain"] = "Just text."
        result = process_section(connection, ["Broken", "Plain"])
        assert result == SectionResult(no_image=["Plain"], timed_out=[])

    def test_empty(self, connection):
        assert process_section(connection, []) == SectionResult()

class test_format_section:
    def test_basic(self):
        result = SectionResult(no_image=["Foo", "Bar"], timed_out=["Baz"])
        expected = """
== Cardiology ==

Articles without infobox image or File Commons:
# [[Foo]]
# [[Bar]]

Articles with Request timed out:
# [[Baz]]
"""
        assert format_section("Cardiology", result) == expected

    def test_empty_lists(self):
        expected = """
== Cardiology ==

Articles without infobox image or File Commons:

Articles with Request timed out:
"""
        assert format_section("Cardiology", SectionResult()) == expected

    def test_unnamed_section(self):
        text = format_section(None, SectionResult())
        assert text.startswith("\n== (no section) ==\n")

class test_build_report:
    def test_sections_in_order(self, wiki, connection):
        wiki.pages["Foo"] = "Just text."
        wiki.pages["Bar"] = INFOBOX % ("Bar", "Bar")
        wiki.pages["Baz"] = "Just text."
        sections = [
            Section("First", ("Foo", "Bar")),
            Section("Second", ("Baz",)),
        ]
        report = build_report(connection, sections)
        assert report == """\
== First ==

Articles without infobox image or File Commons:
# [[Foo]]

Articles with Request timed out:

== Second ==

Articles without infobox image or File Commons:
# [[Baz]]

Articles with Request timed out:"""

    def test_section_without_articles_is_skipped(self, connection):
        assert build_report(connection, [Section("Empty", ())]) == ""

    def test_no_sections(self, connection):
        assert build_report(connection, []) == ""

class test_get_output_filename:
    def test_not_existing(self, tmp_path):
        base = tmp_path / "output.txt"
        assert get_output_filename(base) == str(base)

    def test_numeric_suffix(self, tmp_path):
        base = tmp_path / "output.txt"
        base.touch()
        assert get_output_filename(base) == str(tmp_path / "output1.txt")
        (tmp_path / "output1.txt").touch()
        assert get_output_filename(base) == str(tmp_path / "output2.txt")

    def test_first_unused_suffix(self, tmp_path):
        (tmp_path / "output.txt").touch()
        (tmp_path / "output2.txt").touch()
        assert get_output_filename(tmp_path / "output.txt") == str(tmp_path / "output1.txt")

    def test_without_extension(self, tmp_path):
        (tmp_path / "report").touch()
        assert get_output_filename(tmp_path / "report") == str(tmp_path / "report1")

class test_write_report:
    def test_previous_reports_are_kept(self, tmp_path):
        base = tmp_path / "output.txt"
        assert write_report("first", base) == str(base)
        assert write_report("second", base) == str(tmp_path / "output1.txt")
        assert write_report("third", base) == str(tmp_path / "output2.txt")
        assert base.read_text() == "first"
        assert (tmp_path / "output1.txt").read_text() == "second"
        assert (tmp_path / "output2.txt").read_text() == "third"

class test_ReportRunner:
    def test_run(self, wiki, connection, tmp_path):
        wiki.pages["Asthma"] = "Just text."
        wiki.pages["Malaria"] = "[[File:Malaria.png]]"
        wiki.timeouts.add("Gout")
        input_file = tmp_path / "input.txt"
        input_file.write_text("""\
== Lungs ==
# [[Asthma]] [[de]]
# [[Gout]]
== Tropical ==
# [[Malaria]]
[[WikiProjectMed]]
# [[Cholera]]
""", encoding="utf-8")
        output_file = tmp_path / "output.txt"
        output_file.write_text("previous run", encoding="utf-8")

        runner = ReportRunner(connection, input_file, output_file)
        filename = runner.run()

        assert filename == str(tmp_path / "output1.txt")
        assert output_file.read_text(encoding="utf-8") == "previous run"
        with open(filename, encoding="utf-8") as f:
            assert f.read() == """\
== Lungs ==

Articles without infobox image or File Commons:
# [[Asthma]]

Articles with Request timed out:
# [[Gout]]

== Tropical ==

Articles without infobox image or File Commons:

Articles with Request timed out:"""
        assert wiki.requested == ["Asthma", "Gout", "Malaria"]

    def test_missing_input(self, connection, tmp_path):
        runner = ReportRunner(connection, tmp_path / "input.txt", tmp_path / "output.txt")
        with pytest.raises(FileNotFoundError):
            runner.run()
        assert not (tmp_path / "output.txt").exists()
