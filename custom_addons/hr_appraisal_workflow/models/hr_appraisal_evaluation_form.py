# -*- coding: utf-8 -*-
from odoo import models, fields, api
from odoo.exceptions import UserError, ValidationError
import logging

_logger = logging.getLogger(__name__)

FIELD_TYPES = [
    ("text", "Text"),
    ("textarea", "Text Area"),
    ("number", "Number"),
    ("rating", "Rating"),
    ("dropdown", "Dropdown"),
    ("checkbox", "Checkbox"),
    ("date", "Date"),
    ("file", "File"),
]


def _format_number(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class HrAppraisalEvaluationForm(models.Model):
    _name = "hr.appraisal.evaluation.form"
    _description = "Appraisal Evaluation Form"
    _order = "name"

    name = fields.Char("Form Name", required=True)
    description = fields.Text("Description")
    field_ids = fields.One2many(
        "hr.appraisal.evaluation.form.field", "form_id", string="Fields", copy=True
    )
    field_count = fields.Integer(compute="_compute_field_count")
    required_field_count = fields.Integer(compute="_compute_field_count")
    active = fields.Boolean(default=True)

    @api.depends("field_ids", "field_ids.required")
    def _compute_field_count(self):
        for form in self:
            form.field_count = len(form.field_ids)
            form.required_field_count = len(form.field_ids.filtered("required"))

    def get_missing_required_fields(self, form_data):
        """Required fields whose answer is empty in ``form_data``.

        Zero, False, empty strings and empty lists all count as missing.
        """
        self.ensure_one()
        form_data = form_data or {}
        return self.field_ids.filtered(
            lambda f: f.required and not form_data.get(f.key)
        )

    def validate_form_data(self, form_data):
        """Raise a UserError when the answers cannot be submitted"""
        self.ensure_one()
        missing = self.get_missing_required_fields(form_data)
        if missing:
            raise UserError(
                "Please fill in all required fields: %s" % ", ".join(missing.mapped("label"))
            )
        for field in self.field_ids:
            value = (form_data or {}).get(field.key)
            if value in (None, False, "", []):
                continue
            field._check_answer(value)
        return True

    def format_answers(self, form_data):
        """Ordered, display-ready answers for the read-only form view and exports"""
        self.ensure_one()
        form_data = form_data or {}
        return [
            {
                "key": field.key,
                "label": field.label,
                "type": field.field_type,
                "value": form_data.get(field.key),
                "display": field._format_answer(form_data.get(field.key)),
            }
            for field in self.field_ids
        ]

    @api.model
    def create_default_forms(self):
        """Create the standard evaluation forms used by the default templates"""
        forms = [
            {
                "name": "Employee Self-Evaluation Form",
                "description": "Comprehensive self-evaluation form for employees to assess their own "
                               "performance, achievements, and goals",
                "fields": [
                    ("field-1", "Overall Performance Rating", "rating", True,
                     {"min_value": 1, "max_value": 5,
                      "help_text": "Rate your overall performance from 1 (Needs Improvement) to 5 (Exceeds Expectations)"}),
                    ("field-2", "Key Achievements", "textarea", True,
                     {"placeholder": "List your key achievements, completed projects, and significant contributions"}),
                    ("field-3", "Technical Skills Development", "textarea", True,
                     {"placeholder": "Describe new skills learned, certifications obtained, or technical growth"}),
                    ("field-4", "Challenges Faced", "textarea", False, {}),
                    ("field-5", "Goals for Next Period", "textarea", True, {}),
                    ("field-6", "Training Interests", "checkbox", False,
                     {"options": "Technical Training\nLeadership Development\nCommunication Skills\nProject Management"}),
                ],
            },
            {
                "name": "Manager Evaluation Form",
                "description": "Evaluation form for managers to assess employee performance",
                "fields": [
                    ("field-7", "Overall Performance", "rating", True, {"min_value": 1, "max_value": 5}),
                    ("field-8", "Quality of Work", "rating", True, {"min_value": 1, "max_value": 5}),
                    ("field-9", "Teamwork & Collaboration", "rating", True, {"min_value": 1, "max_value": 5}),
                    ("field-10", "Strengths", "textarea", True, {}),
                    ("field-11", "Areas for Improvement", "textarea", True, {}),
                    ("field-12", "Promotion Recommendation", "dropdown", True,
                     {"options": "Ready Now\nReady in 6-12 Months\nNot Ready"}),
                ],
            },
            {
                "name": "Approval Form",
                "description": "Final approval of the appraisal outcome",
                "fields": [
                    ("field-13", "Ratings Confirmed", "checkbox", True, {}),
                    ("field-14", "Approval Notes", "textarea", False, {}),
                ],
            },
            {
                "name": "Meeting Notes Form",
                "description": "Notes and action items recorded after a review meeting",
                "fields": [
                    ("field-15", "Meeting Date", "date", True, {}),
                    ("field-16", "Discussion Summary", "textarea", True, {}),
                    ("field-17", "Action Items", "textarea", False, {}),
                ],
            },
            {
                "name": "Team Feedback Form",
                "description": "360-degree feedback form for collecting input from team members and peers",
                "fields": [
                    ("field-32", "Leadership & Direction", "rating", True, {"min_value": 1, "max_value": 5}),
                    ("field-33", "Communication", "rating", True, {"min_value": 1, "max_value": 5}),
                    ("field-34", "Support & Development", "rating", True, {"min_value": 1, "max_value": 5}),
                    ("field-35", "Strengths", "textarea", True, {}),
                    ("field-36", "Areas for Improvement", "textarea", True, {}),
                    ("field-37", "Additional Feedback", "textarea", False, {}),
                ],
            },
            {
                "name": "Executive Self-Assessment",
                "description": "Self-assessment for senior executives covering strategic initiatives, "
                               "leadership, and business impact",
                "fields": [
                    ("field-38", "Strategic Vision & Execution", "rating", True, {"min_value": 1, "max_value": 5}),
                    ("field-39", "Business Impact", "rating", True, {"min_value": 1, "max_value": 5}),
                    ("field-40", "Key Strategic Initiatives", "textarea", True, {}),
                    ("field-41", "Business Results", "textarea", True, {}),
                    ("field-45", "Future Strategic Priorities", "textarea", True, {}),
                ],
            },
            {
                "name": "Stakeholder Feedback Form",
                "description": "Feedback from board members, peers, and key stakeholders about executive performance",
                "fields": [
                    ("field-46", "Strategic Leadership", "rating", True, {"min_value": 1, "max_value": 5}),
                    ("field-47", "Business Acumen", "rating", True, {"min_value": 1, "max_value": 5}),
                    ("field-48", "Decision Making", "rating", True, {"min_value": 1, "max_value": 5}),
                    ("field-50", "Strengths", "textarea", True, {}),
                    ("field-51", "Development Areas", "textarea", True, {}),
                    ("field-52", "Overall Assessment", "textarea", True, {}),
                ],
            },
        ]

        created = self.browse()
        for form_data in forms:
            existing = self.with_context(active_test=False).search([("name", "=", form_data["name"])], limit=1)
            if existing:
                continue
            lines = []
            for sequence, (key, label, field_type, required, extra) in enumerate(form_data["fields"], start=1):
                vals = {
                    "key": key,
                    "label": label,
                    "field_type": field_type,
                    "required": required,
                    "sequence": sequence,
                }
                vals.update(extra)
                lines.append((0, 0, vals))
            created |= self.create({
                "name": form_data["name"],
                "description": form_data["description"],
                "field_ids": lines,
            })
        if created:
            _logger.info(f"Created {len(created)} default evaluation forms")
        return created


class HrAppraisalEvaluationFormField(models.Model):
    _name = "hr.appraisal.evaluation.form.field"
    _description = "Appraisal Evaluation Form Field"
    _order = "sequence, id"

    form_id = fields.Many2one(
        "hr.appraisal.evaluation.form", string="Form", required=True, ondelete="cascade"
    )
    key = fields.Char(
        "Key",
        copy=False,
        help="Identifier under which the answer is stored; generated when left empty",
    )
    label = fields.Char("Label", required=True)
    field_type = fields.Selection(FIELD_TYPES, string="Type", required=True, default="text")
    required = fields.Boolean("Required", default=False)
    options = fields.Text("Options", help="One option per line (dropdown and checkbox fields)")
    min_value = fields.Float("Minimum")
    max_value = fields.Float("Maximum")
    placeholder = fields.Char("Placeholder")
    help_text = fields.Char("Help Text")
    sequence = fields.Integer(default=10)

    _sql_constraints = [
        ("unique_key_per_form", "UNIQUE(form_id, key)", "Field keys must be unique within a form."),
    ]

    @api.model_create_multi
    def create(self, vals_list):
        records = super().create(vals_list)
        for record in records.filtered(lambda r: not r.key):
            record.key = f"field_{record.id}"
        return records

    @api.constrains("min_value", "max_value", "field_type")
    def _check_range(self):
        for record in self:
            if record.field_type in ("number", "rating") and record.max_value:
                if record.min_value >= record.max_value:
                    raise ValidationError(
                        f"Minimum must be lower than maximum for field '{record.label}'."
                    )

    @api.constrains("options", "field_type")
    def _check_options(self):
        for record in self:
            if record.field_type == "dropdown" and not record.get_options():
                raise ValidationError(f"Dropdown field '{record.label}' needs at least one option.")

    def get_options(self):
        self.ensure_one()
        return [line.strip() for line in (self.options or "").splitlines() if line.strip()]

    def _check_answer(self, value):
        """Validate a non-empty answer against the field definition"""
        self.ensure_one()
        if self.field_type in ("number", "rating"):
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise UserError(f"'{self.label}' must be a number.")
            if self.max_value and not self.min_value <= number <= self.max_value:
                raise UserError(
                    f"'{self.label}' must be between {_format_number(self.min_value)} "
                    f"and {_format_number(self.max_value)}."
                )
        elif self.field_type == "dropdown":
            if value not in self.get_options():
                raise UserError(f"'{value}' is not a valid option for '{self.label}'.")
        elif self.field_type == "checkbox" and isinstance(value, list):
            invalid = [v for v in value if v not in self.get_options()]
            if invalid:
                raise UserError(
                    f"Invalid option(s) for '{self.label}': {', '.join(invalid)}"
                )

    def _format_answer(self, value):
        self.ensure_one()
        if value in (None, False, "", []):
            if self.field_type == "checkbox" and value is False:
                return "No"
            return "-"
        if self.field_type == "rating":
            if self.max_value:
                return f"{_format_number(value)} / {_format_number(self.max_value)}"
            return _format_number(value)
        if self.field_type == "number":
            return _format_number(value)
        if self.field_type == "checkbox":
            if isinstance(value, list):
                return ", ".join(value)
            return "Yes" if value else "No"
        if self.field_type == "file" and isinstance(value, dict):
            return value.get("name") or "-"
        return str(value)
