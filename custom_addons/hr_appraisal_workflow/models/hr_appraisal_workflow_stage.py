# -*- coding: utf-8 -*-
import re
from datetime import timedelta

from dateutil.relativedelta import relativedelta

from odoo import models, fields, api
from odoo.exceptions import ValidationError

from .hr_appraisal_workflow_template import INTERVAL_UNITS

MANAGER_LEVEL_TOKEN = re.compile(r"^manager_level_(\d+)$")

STAGE_TYPES = [
    ("evaluation", "Evaluation"),
    ("meeting", "Meeting"),
    ("review", "Review"),
    ("approval", "Approval"),
]

DUE_DATE_TYPES = [
    ("before_interval", "Before Appraisal Date"),
    ("on_interval", "On Appraisal Date"),
    ("after_interval", "After Appraisal Date"),
    ("custom", "Custom"),
]


def parse_manager_level(token):
    """Level number of a ``manager_level_N`` attendee token, or None"""
    match = MANAGER_LEVEL_TOKEN.match(token or "")
    return int(match.group(1)) if match else None


class HrAppraisalWorkflowStage(models.Model):
    _name = "hr.appraisal.workflow.stage"
    _description = "Appraisal Review Stage"
    _order = "template_id, sequence, id"

    template_id = fields.Many2one(
        "hr.appraisal.workflow.template", string="Procedure", required=True, ondelete="cascade"
    )
    name = fields.Char("Stage Name", required=True)
    description = fields.Text("Description")
    sequence = fields.Integer("Order", default=10)
    stage_type = fields.Selection(STAGE_TYPES, string="Type", required=True, default="evaluation")
    evaluation_form_id = fields.Many2one("hr.appraisal.evaluation.form", string="Evaluation Form")
    manager_level = fields.Integer("Manager Level")
    attendees = fields.Char(
        "Attendees",
        default="employee",
        help="Comma separated participants: 'employee' and/or 'manager_level_N'",
    )
    due_date_type = fields.Selection(DUE_DATE_TYPES, string="Due Date")
    due_date_offset = fields.Integer(
        "Offset", help="Weeks before/after the appraisal date, or units for a custom due date"
    )
    due_date_unit = fields.Selection(INTERVAL_UNITS, string="Offset Unit")
    required = fields.Boolean("Required", default=True)
    required_stage_ids = fields.Many2many(
        "hr.appraisal.workflow.stage",
        "hr_appraisal_workflow_stage_prerequisite_rel",
        "stage_id",
        "required_stage_id",
        string="Prerequisite Stages",
        copy=False,
        domain="[('template_id', '=', template_id), ('id', '!=', id)]",
        help="Stages that must be completed before this stage can proceed",
    )
    reminder_enabled = fields.Boolean("Reminders", default=True)
    reminder_days = fields.Integer("Reminder (Days Before)", default=7)

    @api.constrains("due_date_offset", "manager_level", "reminder_days")
    def _check_non_negative(self):
        for stage in self:
            if stage.due_date_offset < 0:
                raise ValidationError(
                    "Due date offset cannot be negative; use 'Before Appraisal Date' instead."
                )
            if stage.manager_level < 0:
                raise ValidationError("Manager level cannot be negative.")
            if stage.reminder_days < 0:
                raise ValidationError("Reminder days cannot be negative.")

    @api.constrains("attendees")
    def _check_attendees(self):
        for stage in self:
            if not stage.get_attendee_tokens():
                raise ValidationError("Please select at least one attendee")
            for token in stage.get_attendee_tokens():
                if token != "employee" and not parse_manager_level(token):
                    raise ValidationError(
                        f"Unknown attendee '{token}'. Use 'employee' or 'manager_level_N'."
                    )

    @api.constrains("required_stage_ids")
    def _check_prerequisites(self):
        for stage in self:
            if stage in stage.required_stage_ids:
                raise ValidationError("A stage cannot be its own prerequisite.")
            if stage.required_stage_ids.filtered(lambda s: s.template_id != stage.template_id):
                raise ValidationError("Prerequisite stages must belong to the same procedure.")

    def get_attendee_tokens(self):
        self.ensure_one()
        return [token.strip() for token in (self.attendees or "").split(",") if token.strip()]

    def get_manager_levels(self):
        """Manager levels referenced by the attendee tokens, in order"""
        self.ensure_one()
        levels = [parse_manager_level(token) for token in self.get_attendee_tokens()]
        return [level for level in levels if level]

    def compute_due_date(self, start_date, end_date=None):
        """Due date of this stage for a cycle starting on ``start_date``"""
        self.ensure_one()
        if not self.due_date_type or not start_date:
            return None
        offset = self.due_date_offset
        if self.due_date_type == "on_interval":
            return start_date
        if self.due_date_type == "before_interval":
            return start_date - timedelta(weeks=offset) if offset else start_date
        if self.due_date_type == "after_interval":
            if offset:
                return start_date + timedelta(weeks=offset)
            return end_date or start_date
        if self.due_date_type == "custom" and self.due_date_unit:
            if self.due_date_unit == "days":
                return start_date + timedelta(days=offset)
            if self.due_date_unit == "weeks":
                return start_date + timedelta(weeks=offset)
            if self.due_date_unit == "months":
                return start_date + relativedelta(months=offset)
        return start_date

    def get_offset_days(self):
        """Signed distance in days between the appraisal date and this stage's due date"""
        self.ensure_one()
        offset = self.due_date_offset or 0
        if self.due_date_type == "before_interval":
            return -(offset * 7)
        if self.due_date_type == "after_interval":
            return offset * 7
        if self.due_date_type == "custom" and offset and self.due_date_unit:
            config = self.env["hr.appraisal.workflow.config"].get_config()
            return offset * config._get_interval_unit_days(self.due_date_unit)
        return 0
