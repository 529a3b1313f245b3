# -*- coding: utf-8 -*-
import json

from odoo import models, fields, api
from odoo.tools import html_escape


class HrAppraisalStageCompletion(models.Model):
    _name = "hr.appraisal.stage.completion"
    _description = "Appraisal Stage Completion"
    _order = "assignment_id, stage_sequence, id"

    assignment_id = fields.Many2one(
        "hr.appraisal.workflow.assignment", string="Review Cycle", required=True, ondelete="cascade", index=True
    )
    stage_id = fields.Many2one(
        "hr.appraisal.workflow.stage", string="Stage", required=True, ondelete="cascade"
    )
    stage_sequence = fields.Integer(related="stage_id.sequence", store=True)
    stage_type = fields.Selection(related="stage_id.stage_type")
    employee_id = fields.Many2one(related="assignment_id.employee_id", store=True)
    evaluation_form_id = fields.Many2one(related="stage_id.evaluation_form_id")
    completed = fields.Boolean("Completed", default=False)
    completed_date = fields.Datetime("Completed On")
    completed_by_id = fields.Many2one("res.users", string="Completed By")
    form_data = fields.Json("Form Data", default=dict)
    approved = fields.Boolean("Approved")
    comment = fields.Text("Comment")
    response_html = fields.Html("Responses", compute="_compute_response_html", sanitize=True)

    _sql_constraints = [
        ("unique_assignment_stage", "UNIQUE(assignment_id, stage_id)", "A stage can only be completed once per review cycle."),
    ]

    @api.depends("form_data", "stage_id.evaluation_form_id")
    def _compute_response_html(self):
        for completion in self:
            rows = "".join(
                f"<tr><td><strong>{html_escape(line['label'])}</strong></td>"
                f"<td>{html_escape(line['display'])}</td></tr>"
                for line in completion.get_form_response_lines()
            )
            completion.response_html = f"<table class='table table-sm'>{rows}</table>" if rows else False

    def get_form_response_lines(self):
        """Answers of the stage's evaluation form in field order"""
        self.ensure_one()
        form = self.stage_id.evaluation_form_id
        if not form:
            return []
        return form.format_answers(self.form_data or {})

    def _get_export_filename(self):
        self.ensure_one()
        form_name = self.stage_id.evaluation_form_id.name or "form"
        today = fields.Date.to_string(fields.Date.today())
        return f"{form_name}-{self.assignment_id.employee_id.name}-{today}.json"

    def export_form_response(self):
        """(filename, JSON bytes) of the submitted answers"""
        self.ensure_one()
        assignment = self.assignment_id
        payload = {
            "formName": self.stage_id.evaluation_form_id.name or "",
            "employeeName": assignment.employee_id.name,
            "managerName": assignment.get_stage_manager_name(self.stage_id),
            "procedureName": assignment.template_id.name,
            "stepName": self.stage_id.name,
            "completedDate": fields.Datetime.to_string(self.completed_date) if self.completed_date else None,
            "responses": self.form_data or {},
        }
        content = json.dumps(payload, indent=2, default=str).encode("utf-8")
        return self._get_export_filename(), content

    def action_download_response(self):
        self.ensure_one()
        return {
            "type": "ir.actions.act_url",
            "url": f"/hr_appraisal_workflow/form_response/{self.id}/download",
            "target": "self",
        }
