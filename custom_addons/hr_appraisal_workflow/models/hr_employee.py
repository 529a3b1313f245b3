from odoo import models, fields, api

ROLE_CATEGORIES = [
    ("no_managers", "No Managers"),
    ("one_manager", "One Manager"),
    ("two_managers", "Two or More Managers"),
    ("manages_others", "Manages Others"),
]


def is_stage_type_allowed_for_role(stage_type, role_category):
    """Whether an employee of ``role_category`` takes part in stages of ``stage_type``"""
    if role_category == "no_managers":
        return stage_type in ("meeting", "review", "approval")
    if role_category in ("one_manager", "two_managers"):
        return stage_type in ("evaluation", "meeting")
    if role_category == "manages_others":
        return stage_type != "approval"
    return False


class HrEmployee(models.Model):
    _inherit = "hr.employee"

    appraisal_manager_ids = fields.One2many(
        "hr.appraisal.manager.level", "employee_id", string="Appraisal Managers"
    )
    appraisal_report_level_ids = fields.One2many(
        "hr.appraisal.manager.level",
        "manager_employee_id",
        string="Appraisal Reports",
        help="Manager levels in which this employee is the manager",
    )
    workflow_template_ids = fields.Many2many(
        "hr.appraisal.workflow.template",
        "hr_employee_workflow_template_rel",
        "employee_id",
        "template_id",
        string="Assigned Procedures",
    )
    workflow_assignment_ids = fields.One2many(
        "hr.appraisal.workflow.assignment", "employee_id", string="Review Cycles"
    )
    workflow_assignment_count = fields.Integer(compute="_compute_workflow_assignment_count")
    appraisal_role_category = fields.Selection(
        ROLE_CATEGORIES, string="Appraisal Role", compute="_compute_appraisal_role_category"
    )

    @api.depends("workflow_assignment_ids")
    def _compute_workflow_assignment_count(self):
        for emp in self:
            emp.workflow_assignment_count = len(emp.workflow_assignment_ids)

    @api.depends("appraisal_manager_ids", "appraisal_report_level_ids")
    def _compute_appraisal_role_category(self):
        for emp in self:
            emp.appraisal_role_category = emp.get_appraisal_role_category()

    def get_appraisal_role_category(self):
        """
        Role category from the manager hierarchy:
        - manages_others: another employee lists this one as a manager
        - no_managers / one_manager / two_managers: by number of filled manager levels
        """
        self.ensure_one()
        manages_others = self.appraisal_report_level_ids.filtered(
            lambda level: level.employee_id and level.employee_id != self
        )
        if manages_others:
            return "manages_others"
        manager_count = len(self.appraisal_manager_ids.filtered(lambda level: level.is_filled()))
        if manager_count == 0:
            return "no_managers"
        if manager_count == 1:
            return "one_manager"
        return "two_managers"

    def filter_stages_by_role(self, stages):
        """Stages of the types this employee's role category takes part in"""
        self.ensure_one()
        category = self.get_appraisal_role_category()
        return stages.filtered(lambda s: is_stage_type_allowed_for_role(s.stage_type, category))

    def get_appraisal_manager(self, level):
        self.ensure_one()
        return self.appraisal_manager_ids.filtered(lambda m: m.level == level)[:1]

    def action_view_workflow_assignments(self):
        self.ensure_one()
        return {
            "name": f"{self.name}'s Review Cycles",
            "type": "ir.actions.act_window",
            "res_model": "hr.appraisal.workflow.assignment",
            "view_mode": "list,form",
            "domain": [("employee_id", "=", self.id)],
            "context": {"default_employee_id": self.id},
            "target": "current",
        }

    def action_assign_review_cycle(self):
        return {
            "name": "Assign Review Cycle",
            "type": "ir.actions.act_window",
            "res_model": "hr.appraisal.assign.wizard",
            "view_mode": "form",
            "target": "new",
            "context": {"default_employee_ids": [(6, 0, self.ids)]},
        }
