"""Builders for small Access-style XML exports and their XSDs used across importer tests."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping

from lxml import etree


CHILDREN_XSD = """<?xml version="1.0" encoding="UTF-8"?>
<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema">
  <xsd:element name="dataroot">
    <xsd:complexType>
      <xsd:sequence>
        <xsd:element ref="Children" minOccurs="0" maxOccurs="unbounded"/>
      </xsd:sequence>
      <xsd:attribute name="generated" type="xsd:dateTime"/>
    </xsd:complexType>
  </xsd:element>
  <xsd:element name="Children">
    <xsd:complexType>
      <xsd:all>
        <xsd:element name="Reference" type="xsd:string"/>
        <xsd:element name="Child_x0020_Name" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Child_x0020_Surname" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Child_x0020_birthdate" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Account_x0020_Person_x0020_Name" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Account_x0020_Person_x0020_Cellphone" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Mother_x0020_Name" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Mother_x0020_Email" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Address1" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Code" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Family" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Charge" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Print_x0020_Id_x0020_Card" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Cnt" type="xsd:string" minOccurs="0"/>
        <xsd:element name="OnlineEntry" type="xsd:string" minOccurs="0"/>
      </xsd:all>
    </xsd:complexType>
  </xsd:element>
</xsd:schema>
"""

ACTIVITIES_XSD = """<?xml version="1.0" encoding="UTF-8"?>
<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema">
  <xsd:element name="dataroot">
    <xsd:complexType>
      <xsd:sequence>
        <xsd:element ref="Activity" minOccurs="0" maxOccurs="unbounded"/>
      </xsd:sequence>
      <xsd:attribute name="generated" type="xsd:dateTime"/>
    </xsd:complexType>
  </xsd:element>
  <xsd:element name="Activity">
    <xsd:complexType>
      <xsd:all>
        <xsd:element name="ActivityID" type="xsd:int"/>
        <xsd:element name="Program" type="xsd:string" minOccurs="0"/>
        <xsd:element name="ProgramName" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Educational_x0020_Focus" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Folder" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Grade" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Icon" type="xsd:string" minOccurs="0"/>
      </xsd:all>
    </xsd:complexType>
  </xsd:element>
</xsd:schema>
"""

SCHOOLS_XSD = """<?xml version="1.0" encoding="UTF-8"?>
<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema">
  <xsd:element name="dataroot">
    <xsd:complexType>
      <xsd:sequence>
        <xsd:element ref="School" minOccurs="0" maxOccurs="unbounded"/>
      </xsd:sequence>
      <xsd:attribute name="generated" type="xsd:dateTime"/>
    </xsd:complexType>
  </xsd:element>
  <xsd:element name="School">
    <xsd:complexType>
      <xsd:all>
        <xsd:element name="School_x0020_Id" type="xsd:int"/>
        <xsd:element name="Short_x0020_School" type="xsd:string" minOccurs="0"/>
        <xsd:element name="School_x0020_Description" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Trok" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Price" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Print" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Import" type="xsd:string" minOccurs="0"/>
      </xsd:all>
    </xsd:complexType>
  </xsd:element>
</xsd:schema>
"""

CLASS_GROUPS_XSD = """<?xml version="1.0" encoding="UTF-8"?>
<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema">
  <xsd:element name="dataroot">
    <xsd:complexType>
      <xsd:sequence>
        <xsd:element ref="Class_x0020_Group" minOccurs="0" maxOccurs="unbounded"/>
      </xsd:sequence>
      <xsd:attribute name="generated" type="xsd:dateTime"/>
    </xsd:complexType>
  </xsd:element>
  <xsd:element name="Class_x0020_Group">
    <xsd:complexType>
      <xsd:all>
        <xsd:element name="Class_x0020_Group" type="xsd:string"/>
        <xsd:element name="School_x0020_Id" type="xsd:short"/>
        <xsd:element name="Description" type="xsd:string" minOccurs="0"/>
        <xsd:element name="DayTruck" type="xsd:string" minOccurs="0"/>
        <xsd:element name="DayId" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Start_x0020_Time" type="xsd:string" minOccurs="0"/>
        <xsd:element name="End_x0020_Time" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Sequence" type="xsd:string" minOccurs="0"/>
        <xsd:element name="Import" type="xsd:string" minOccurs="0"/>
      </xsd:all>
    </xsd:complexType>
  </xsd:element>
</xsd:schema>
"""


def write_legacy_xml(path: Path, record_element: str, records: Iterable[Mapping[str, str | None]]) -> Path:
    """Write an Access-style ``dataroot`` export; keys are raw (escaped) element names."""

    root = etree.Element("dataroot", generated="2024-01-15T08:30:00")
    for values in records:
        record = etree.SubElement(root, record_element)
        for name, value in values.items():
            child = etree.SubElement(record, name)
            if value is not None:
                child.text = value
    etree.ElementTree(root).write(str(path), xml_declaration=True, encoding="UTF-8", pretty_print=True)
    return path


def child(reference: str, name: str = "Ada", birthdate: str | None = "2016-03-04T00:00:00", **extra) -> dict:
    values = {"Reference": reference, "Child_x0020_Name": name}
    if birthdate is not None:
        values["Child_x0020_birthdate"] = birthdate
    values.update(extra)
    return values


def school(legacy_id: str, short_name: str | None = "Oakdale", **extra) -> dict:
    values = {"School_x0020_Id": legacy_id}
    if short_name is not None:
        values["Short_x0020_School"] = short_name
    values.update(extra)
    return values


def class_group(code: str, school_id: str = "1", import_flag: str = "1", **extra) -> dict:
    values = {"Class_x0020_Group": code, "School_x0020_Id": school_id, "Import": import_flag}
    values.update(extra)
    return values
