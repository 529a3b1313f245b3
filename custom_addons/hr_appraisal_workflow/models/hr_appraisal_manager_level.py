# -*- coding: utf-8 -*-
from odoo import models, fields, api
from odoo.exceptions import ValidationError


class HrAppraisalManagerLevel(models.Model):
    """One level of an employee's appraisal hierarchy (level 1 = direct manager)"""
    _name = "hr.appraisal.manager.level"
    _description = "Appraisal Manager Level"
    _order = "level, id"

    employee_id = fields.Many2one(
        "hr.employee", string="Employee", ondelete="cascade", index=True
    )
    assignment_id = fields.Many2one(
        "hr.appraisal.workflow.assignment",
        string="Assignment Override",
        ondelete="cascade",
        index=True,
    )
    level = fields.Integer("Level", required=True, default=1)
    manager_employee_id = fields.Many2one("hr.employee", string="Manager")
    is_external = fields.Boolean("External Manager", default=False)
    external_name = fields.Char("External Name")
    external_email = fields.Char("External Email")
    is_evaluation_responsible = fields.Boolean(
        "Evaluation Responsible", help="This manager is accountable for the evaluation outcome"
    )
    manager_name = fields.Char(compute="_compute_manager_name")

    _sql_constraints = [
        ("unique_employee_level", "UNIQUE(employee_id, level)", "Each manager level can only be set once per employee."),
        ("unique_assignment_level", "UNIQUE(assignment_id, level)", "Each manager level can only be set once per assignment."),
    ]

    @api.depends("is_external", "external_name", "manager_employee_id.name")
    def _compute_manager_name(self):
        for record in self:
            record.manager_name = record.get_manager_name()

    @api.constrains("employee_id", "assignment_id")
    def _check_owner(self):
        for record in self:
            if bool(record.employee_id) == bool(record.assignment_id):
                raise ValidationError(
                    "A manager level belongs either to an employee or to an assignment override."
                )

    @api.constrains("level")
    def _check_level(self):
        for record in self:
            if record.level < 1:
                raise ValidationError("Manager level must be at least 1.")

    @api.constrains("is_external", "external_name", "manager_employee_id", "employee_id")
    def _check_manager(self):
        for record in self:
            if record.is_external and not record.external_name:
                raise ValidationError("External managers need a name.")
            if record.employee_id and record.manager_employee_id == record.employee_id:
                raise ValidationError("An employee cannot be their own manager.")

    def get_manager_name(self):
        self.ensure_one()
        if self.is_external and self.external_name:
            return self.external_name
        if self.manager_employee_id:
            return self.manager_employee_id.name
        return ""

    def is_filled(self):
        self.ensure_one()
        return bool(self.manager_employee_id or self.external_name)
