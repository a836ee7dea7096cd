from __future__ import annotations

from legacy_xml import child, class_group, school

from childcare_app.importer import init_importer
from childcare_app.models import ClassGroup, Family, ImportRun, School, Student, db


def test_run_reports_final_counts_only(importer_app, runner, children_xml, children_xsd, student_factory, tmp_path):
    student_factory("S002")
    source = children_xml([child("S001"), child("S002"), child("S003", birthdate=None)])
    audit_path = tmp_path / "audit.log"

    result = runner.invoke(
        args=["importer", "run", str(source), str(children_xsd), "--audit-log", str(audit_path)],
    )

    assert result.exit_code == 0, result.output
    assert "imported        : 1" in result.output
    assert "skipped         : 1" in result.output
    assert "errors          : 1" in result.output
    assert "Child birthdate" not in result.output
    assert "Child birthdate" in audit_path.read_text(encoding="utf-8")
    assert db.session.query(ImportRun).count() == 1


def test_preview_flag_leaves_store_untouched(importer_app, runner, children_xml, children_xsd):
    source = children_xml([child("S001", Family="Smith"), child("S002", Family="smith")])

    result = runner.invoke(args=["importer", "run", str(source), str(children_xsd), "--preview"])

    assert result.exit_code == 0, result.output
    assert "Preview (no changes written)" in result.output
    assert "imported        : 2" in result.output
    assert "families_created: 1" in result.output
    assert db.session.query(Student).count() == 0
    assert db.session.query(Family).count() == 0
    assert db.session.query(ImportRun).count() == 0


def test_missing_schema_exits_non_zero(importer_app, runner, children_xml, tmp_path):
    source = children_xml([child("S001")])

    result = runner.invoke(args=["importer", "run", str(source), str(tmp_path / "missing.xsd")])

    assert result.exit_code != 0
    assert "XSD schema file not found" in result.output
    assert db.session.query(Student).count() == 0


def test_schema_violation_exits_non_zero_without_writing(importer_app, runner, children_xml, children_xsd, tmp_path):
    source = children_xml([{"Child_x0020_Name": "No reference"}])
    summary_path = tmp_path / "summary.txt"

    result = runner.invoke(
        args=["importer", "run", str(source), str(children_xsd), "--summary", str(summary_path)],
    )

    assert result.exit_code != 0
    assert "failed schema validation" in result.output
    assert not summary_path.exists()
    assert db.session.query(ImportRun).count() == 0


def test_count_and_sample_do_not_import(importer_app, runner, student_factory, family_factory):
    smiths = family_factory("Smith")
    student_factory("S001", first_name="Ada", last_name="Lovelace", family_id=smiths.id)
    student_factory("S002", first_name="Bea")

    count_result = runner.invoke(args=["importer", "run", "--count"])
    sample_result = runner.invoke(args=["importer", "run", "--sample", "1"])

    assert count_result.exit_code == 0, count_result.output
    assert "Children: 2" in count_result.output
    assert "Families: 1" in count_result.output
    assert sample_result.exit_code == 0, sample_result.output
    assert "[S001] Ada Lovelace (Family: Smith)" in sample_result.output
    assert "S002" not in sample_result.output
    assert db.session.query(ImportRun).count() == 0


def test_activities_entity_and_default_sources(importer_app, runner, activities_xml, activities_xsd):
    source = activities_xml([{"ActivityID": "5", "Program": "ART"}])
    importer_app.config["IMPORTER_DEFAULT_SOURCES"] = {"activities": (str(source), str(activities_xsd))}

    result = runner.invoke(args=["importer", "run", "--entity", "activities"])

    assert result.exit_code == 0, result.output
    assert "imported        : 1" in result.output


def test_artifact_dir_provides_default_output_paths(importer_app, runner, children_xml, children_xsd, tmp_path):
    artifact_dir = tmp_path / "artifacts"
    importer_app.config["IMPORTER_ARTIFACT_DIR"] = str(artifact_dir)

    result = runner.invoke(args=["importer", "run", str(children_xml([child("S001")])), str(children_xsd)])

    assert result.exit_code == 0, result.output
    written = sorted(path.name for path in artifact_dir.iterdir())
    assert len(written) == 2
    assert any(name.endswith("_audit.log") for name in written)
    assert any(name.endswith("_summary.txt") for name in written)


def test_history_lists_recent_runs(importer_app, runner, children_xml, children_xsd):
    source = children_xml([child("S001")])
    runner.invoke(args=["importer", "run", str(source), str(children_xsd)])
    runner.invoke(args=["importer", "run", str(source), str(children_xsd)])

    result = runner.invoke(args=["importer", "history", "-n", "1"])

    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert lines[0].startswith("ID")
    assert len(lines) == 2
    assert "children" in lines[1]
    assert "completed" in lines[1]


def test_history_without_runs(importer_app, runner):
    result = runner.invoke(args=["importer", "history"])

    assert result.exit_code == 0
    assert "No import runs recorded." in result.output


def test_disabled_importer_rejects_commands(app, runner):
    app.config["IMPORTER_ENABLED"] = False
    init_importer(app)

    result = runner.invoke(args=["importer"])

    assert result.exit_code != 0
    assert "IMPORTER_ENABLED=false" in result.output


def test_entity_must_be_enabled(importer_app, runner):
    importer_app.config["IMPORTER_ENTITIES"] = ("children",)

    result = runner.invoke(args=["importer", "run", "--entity", "activities", "--count"])

    assert result.exit_code != 0
    assert "not enabled" in result.output


def test_schools_and_class_groups_from_the_command_line(
    importer_app, runner, schools_xml, schools_xsd, class_groups_xml, class_groups_xsd
):
    schools_source = schools_xml([school("1", School_x0020_Description="Oakdale Primary")])
    groups_source = class_groups_xml([class_group("OAK-MON", DayId="1", Start_x0020_Time="08:30")])

    schools_result = runner.invoke(
        args=["importer", "run", str(schools_source), str(schools_xsd), "--entity", "schools"]
    )
    groups_result = runner.invoke(
        args=["importer", "run", str(groups_source), str(class_groups_xsd), "--entity", "class_groups"]
    )
    sample_result = runner.invoke(args=["importer", "run", "--entity", "class_groups", "--sample", "5"])
    count_result = runner.invoke(args=["importer", "run", "--entity", "schools", "--count"])

    assert schools_result.exit_code == 0, schools_result.output
    assert groups_result.exit_code == 0, groups_result.output
    assert "imported        : 1" in groups_result.output
    assert "[OAK-MON] OAK-MON day 1 08:30-09:00 (Oakdale Primary)" in sample_result.output
    assert "Schools: 1" in count_result.output
    assert db.session.query(School).count() == 1
    assert db.session.query(ClassGroup).one().school is not None


def test_entity_listing_follows_import_order(importer_app, runner):
    result = runner.invoke(args=["importer"])

    assert result.exit_code == 0, result.output
    listed = [line.strip("- ").strip() for line in result.output.splitlines()[1:]]
    assert listed == ["schools", "class_groups", "activities", "children"]
