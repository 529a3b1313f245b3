# -*- coding: utf-8 -*-
from odoo import models, fields, api
from odoo.exceptions import UserError

from ..models.hr_appraisal_evaluation_form import FIELD_TYPES
from ..models.hr_appraisal_workflow_assignment import toast_action


class HrAppraisalFormFillWizard(models.TransientModel):
    _name = "hr.appraisal.form.fill.wizard"
    _description = "Fill Evaluation Form"

    assignment_id = fields.Many2one("hr.appraisal.workflow.assignment", string="Review Cycle")
    stage_id = fields.Many2one("hr.appraisal.workflow.stage", string="Stage")
    form_id = fields.Many2one(related="stage_id.evaluation_form_id", string="Form")
    form_description = fields.Text(related="stage_id.evaluation_form_id.description")
    employee_id = fields.Many2one(related="assignment_id.employee_id")
    template_id = fields.Many2one(related="assignment_id.template_id", string="Procedure")
    manager_name = fields.Char("Manager", compute="_compute_display")
    task_title = fields.Char(compute="_compute_display")
    task_subtitle = fields.Char(compute="_compute_display")
    task_badge = fields.Char(compute="_compute_display")
    already_submitted = fields.Boolean(compute="_compute_display")
    line_ids = fields.One2many("hr.appraisal.form.fill.line", "wizard_id", string="Answers")

    @api.depends("assignment_id", "stage_id")
    def _compute_display(self):
        Assignment = self.env["hr.appraisal.workflow.assignment"]
        for wizard in self:
            assignment, stage = wizard.assignment_id, wizard.stage_id
            if not assignment or not stage:
                wizard.update({
                    "manager_name": "",
                    "task_title": "",
                    "task_subtitle": "",
                    "task_badge": "",
                    "already_submitted": False,
                })
                continue
            display = Assignment.format_task_context_display(
                assignment.get_task_context(stage, self.env.user.employee_id)
            )
            wizard.manager_name = assignment.get_stage_manager_name(stage)
            wizard.task_title = display["title"]
            wizard.task_subtitle = display["subtitle"]
            wizard.task_badge = display["badge"]
            wizard.already_submitted = assignment.is_stage_completed(stage)

    @api.model
    def default_get(self, fields_list):
        res = super().default_get(fields_list)
        if not (res.get("assignment_id") and res.get("stage_id")):
            return res
        assignment, stage = self.env["hr.appraisal.workflow.assignment"]._resolve_stage_context(
            res["assignment_id"], res["stage_id"]
        )
        form = stage.evaluation_form_id
        if not form:
            raise UserError("Form not found")
        if "line_ids" in fields_list:
            form_data = assignment.get_completion(stage).form_data or {}
            Line = self.env["hr.appraisal.form.fill.line"]
            res["line_ids"] = [
                (0, 0, dict(Line._answer_vals(field, form_data.get(field.key)), field_id=field.id))
                for field in form.field_ids
            ]
        return res

    def _collect_form_data(self):
        """Answers keyed by form field key; uploaded files become attachments of the review cycle"""
        self.ensure_one()
        form_data = {}
        for line in self.line_ids:
            if line.field_type == "file":
                if line.value_file:
                    attachment = self.env["ir.attachment"].create({
                        "name": line.value_filename or line.label,
                        "datas": line.value_file,
                        "res_model": "hr.appraisal.workflow.assignment",
                        "res_id": self.assignment_id.id,
                    })
                    line.attachment_id = attachment
                attachment = line.attachment_id
                form_data[line.key] = {"attachment_id": attachment.id, "name": attachment.name} if attachment else None
            else:
                form_data[line.key] = line.get_answer()
        return form_data

    def action_submit(self):
        self.ensure_one()
        if not self.assignment_id or not self.stage_id:
            raise UserError("Missing required information")
        assignment, stage = self.env["hr.appraisal.workflow.assignment"]._resolve_stage_context(
            self.assignment_id.id, self.stage_id.id
        )
        form_data = self._collect_form_data()
        assignment.submit_stage_form(stage, form_data)
        return toast_action("Form submitted successfully!")


class HrAppraisalFormFillLine(models.TransientModel):
    _name = "hr.appraisal.form.fill.line"
    _description = "Evaluation Form Answer"
    _order = "sequence, id"

    wizard_id = fields.Many2one("hr.appraisal.form.fill.wizard", required=True, ondelete="cascade")
    field_id = fields.Many2one("hr.appraisal.evaluation.form.field", string="Field", required=True)
    sequence = fields.Integer(related="field_id.sequence", store=True)
    key = fields.Char(related="field_id.key")
    label = fields.Char(related="field_id.label")
    field_type = fields.Selection(FIELD_TYPES, related="field_id.field_type")
    required = fields.Boolean(related="field_id.required")
    help_text = fields.Char(related="field_id.help_text")
    placeholder = fields.Char(related="field_id.placeholder")
    options = fields.Text(related="field_id.options")
    has_options = fields.Boolean(compute="_compute_has_options")

    value_char = fields.Char("Answer")
    value_text = fields.Text("Answer")
    value_number = fields.Float("Answer")
    value_rating = fields.Integer("Rating")
    value_bool = fields.Boolean("Answer")
    value_date = fields.Date("Answer")
    value_file = fields.Binary("File")
    value_filename = fields.Char("File Name")
    attachment_id = fields.Many2one("ir.attachment", string="Uploaded File")

    @api.depends("field_id.options")
    def _compute_has_options(self):
        for line in self:
            line.has_options = bool(line.field_id.get_options())

    @api.model
    def _answer_vals(self, field, value):
        """Line values pre-filled from a stored answer"""
        if value in (None, False, "", []):
            return {}
        field_type = field.field_type
        if field_type in ("text", "dropdown"):
            return {"value_char": value}
        if field_type == "textarea":
            return {"value_text": value}
        if field_type == "number":
            return {"value_number": value}
        if field_type == "rating":
            return {"value_rating": int(value)}
        if field_type == "checkbox":
            if isinstance(value, list):
                return {"value_text": "\n".join(value)}
            return {"value_bool": bool(value)}
        if field_type == "date":
            return {"value_date": value}
        if field_type == "file" and isinstance(value, dict):
            attachment = self.env["ir.attachment"].browse(value.get("attachment_id")).exists()
            return {"attachment_id": attachment.id, "value_filename": value.get("name")} if attachment else {}
        return {}

    def get_answer(self):
        """Stored (JSON) value of this answer; empty answers come back falsy"""
        self.ensure_one()
        field_type = self.field_type
        if field_type in ("text", "dropdown"):
            return (self.value_char or "").strip()
        if field_type == "textarea":
            return (self.value_text or "").strip()
        if field_type == "number":
            if not self.value_number:
                return None
            return int(self.value_number) if self.value_number.is_integer() else self.value_number
        if field_type == "rating":
            return self.value_rating or None
        if field_type == "checkbox":
            if self.has_options:
                return [line.strip() for line in (self.value_text or "").splitlines() if line.strip()]
            return self.value_bool
        if field_type == "date":
            return fields.Date.to_string(self.value_date) if self.value_date else None
        return None
