# -*- coding: utf-8 -*-
from odoo import models, fields, api
from odoo.tools import html_escape

from ..models.hr_appraisal_workflow_assignment import toast_action


class HrAppraisalApprovalReviewWizard(models.TransientModel):
    _name = "hr.appraisal.approval.review.wizard"
    _description = "Review & Approve Appraisal"

    assignment_id = fields.Many2one("hr.appraisal.workflow.assignment", string="Review Cycle", required=True)
    stage_id = fields.Many2one("hr.appraisal.workflow.stage", string="Stage", required=True)
    employee_id = fields.Many2one(related="assignment_id.employee_id")
    template_id = fields.Many2one(related="assignment_id.template_id")
    state = fields.Selection(related="assignment_id.state")
    progress_completed = fields.Integer(related="assignment_id.progress_completed")
    progress_total = fields.Integer(related="assignment_id.progress_total")
    progress_percent = fields.Float(related="assignment_id.progress_percent")
    manager_name = fields.Char("Approver", compute="_compute_manager_name")
    comment = fields.Text("Comment")
    completed_stage_ids = fields.One2many(
        "hr.appraisal.approval.review.line", "wizard_id", string="Completed Stages"
    )

    @api.depends("assignment_id", "stage_id")
    def _compute_manager_name(self):
        for wizard in self:
            if wizard.assignment_id and wizard.stage_id:
                wizard.manager_name = wizard.assignment_id.get_stage_manager_name(wizard.stage_id)
            else:
                wizard.manager_name = ""

    @api.model
    def default_get(self, fields_list):
        res = super().default_get(fields_list)
        if res.get("assignment_id") and res.get("stage_id"):
            assignment, stage = self.env["hr.appraisal.workflow.assignment"]._resolve_stage_context(
                res["assignment_id"], res["stage_id"]
            )
            completion = assignment.get_completion(stage)
            if completion and "comment" in fields_list:
                res["comment"] = completion.comment
            if "completed_stage_ids" in fields_list:
                res["completed_stage_ids"] = [
                    (0, 0, {
                        "stage_id": item["stage"].id,
                        "completion_id": item["completion"].id,
                        "response_html": self._render_answers(item["stage"], item["form_data"]),
                    })
                    for item in assignment.get_completed_stages()
                    if item["stage"] != stage
                ]
        return res

    @api.model
    def _render_answers(self, stage, form_data):
        form = stage.evaluation_form_id
        if form:
            lines = [(line["label"], line["display"]) for line in form.format_answers(form_data)]
        else:
            lines = [(key, value) for key, value in form_data.items()]
        if not lines:
            return False
        rows = "".join(
            f"<tr><td><strong>{html_escape(label)}</strong></td><td>{html_escape(value)}</td></tr>"
            for label, value in lines
        )
        return f"<table class='table table-sm'>{rows}</table>"

    def _resolve(self):
        self.ensure_one()
        return self.env["hr.appraisal.workflow.assignment"]._resolve_stage_context(
            self.assignment_id.id, self.stage_id.id
        )

    def _reopen(self):
        self.ensure_one()
        return {
            "type": "ir.actions.act_window",
            "name": "Review & Approve",
            "res_model": self._name,
            "res_id": self.id,
            "view_mode": "form",
            "target": "new",
        }

    def action_approve(self):
        assignment, stage = self._resolve()
        assignment.approve_stage(stage, self.comment or "")
        return toast_action("Appraisal approved successfully!")

    def action_reject(self):
        assignment, stage = self._resolve()
        assignment.reject_stage(stage, self.comment)
        return toast_action("Appraisal rejected", title="Rejected", notification_type="warning")


class HrAppraisalApprovalReviewLine(models.TransientModel):
    _name = "hr.appraisal.approval.review.line"
    _description = "Completed Stage Summary"
    _order = "id"

    wizard_id = fields.Many2one("hr.appraisal.approval.review.wizard", required=True, ondelete="cascade")
    stage_id = fields.Many2one("hr.appraisal.workflow.stage", string="Stage")
    stage_type = fields.Selection(related="stage_id.stage_type")
    completion_id = fields.Many2one("hr.appraisal.stage.completion", string="Completion")
    completed_date = fields.Datetime(related="completion_id.completed_date")
    completed_by_id = fields.Many2one(related="completion_id.completed_by_id")
    response_html = fields.Html("Answers", sanitize=True)
    expanded = fields.Boolean("Expanded", default=False)

    def action_toggle_stage(self):
        self.ensure_one()
        self.expanded = not self.expanded
        return self.wizard_id._reopen()
