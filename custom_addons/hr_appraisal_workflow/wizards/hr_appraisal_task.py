# -*- coding: utf-8 -*-
from odoo import models, fields, api
from odoo.exceptions import UserError

from ..models.hr_appraisal_workflow_stage import STAGE_TYPES

TASK_STATUSES = [
    ("pending", "Pending"),
    ("in_progress", "In Progress"),
    ("overdue", "Overdue"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
]

TASK_ROLES = [
    ("employee", "Employee"),
    ("manager", "Manager"),
    ("reviewer", "Reviewer"),
    ("approver", "Approver"),
]


class HrAppraisalTask(models.TransientModel):
    """Row of the 'My Tasks' list, rebuilt each time the list is opened"""
    _name = "hr.appraisal.task"
    _description = "Appraisal Task"
    _order = "status_order, due_date, id"

    user_id = fields.Many2one("res.users", string="User", default=lambda self: self.env.user)
    assignment_id = fields.Many2one("hr.appraisal.workflow.assignment", string="Review Cycle")
    stage_id = fields.Many2one("hr.appraisal.workflow.stage", string="Stage")
    employee_id = fields.Many2one("hr.employee", string="Employee")
    form_id = fields.Many2one("hr.appraisal.evaluation.form", string="Form")
    title = fields.Char("Task")
    subtitle = fields.Char("For")
    badge = fields.Char("Badge")
    stage_type = fields.Selection(STAGE_TYPES, string="Type")
    role = fields.Selection(TASK_ROLES, string="Your Role")
    status = fields.Selection(TASK_STATUSES, string="Status")
    status_order = fields.Integer()
    due_date = fields.Date("Due Date")
    attendees = fields.Char("Attendees")

    @api.model
    def action_open_my_tasks(self):
        """Rebuild the current user's task rows and open them"""
        self.search([("user_id", "=", self.env.user.id)]).unlink()
        employee = self.env.user.employee_id
        order = {status: index for index, (status, _label) in enumerate(TASK_STATUSES)}
        # cycles of other employees are read on behalf of their managers
        tasks = self.env["hr.appraisal.workflow.assignment"].sudo().get_tasks_for_employee(employee.sudo())
        self.create([
            {
                "user_id": self.env.user.id,
                "assignment_id": task["assignment_id"],
                "stage_id": task["stage_id"],
                "employee_id": task["employee_id"],
                "form_id": task["form_id"] or False,
                "title": task["title"],
                "subtitle": task["subtitle"],
                "badge": task["badge"],
                "stage_type": task["stage_type"],
                "role": task["role"],
                "status": task["status"],
                "status_order": order[task["status"]],
                "due_date": task["due_date"] or False,
                "attendees": ", ".join(task["attendees"]),
            }
            for task in tasks
        ])
        return {
            "type": "ir.actions.act_window",
            "name": "My Tasks",
            "res_model": self._name,
            "view_mode": "list",
            "domain": [("user_id", "=", self.env.user.id)],
            "target": "current",
        }

    def action_open(self):
        self.ensure_one()
        return self.assignment_id.action_open_stage(self.stage_id)

    def action_view_response(self):
        self.ensure_one()
        completion = self.assignment_id.get_completion(self.stage_id)
        if not completion.completed:
            raise UserError("This stage has not been completed yet.")
        return {
            "type": "ir.actions.act_window",
            "name": self.form_id.name or self.stage_id.name,
            "res_model": "hr.appraisal.stage.completion",
            "res_id": completion.id,
            "view_mode": "form",
            "target": "new",
        }
