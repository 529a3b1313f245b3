# -*- coding: utf-8 -*-
from odoo import models, fields, api
from odoo.exceptions import UserError

from ..models.hr_appraisal_workflow_assignment import toast_action


class HrAppraisalManagerOverrideWizard(models.TransientModel):
    _name = "hr.appraisal.manager.override.wizard"
    _description = "Edit Review Cycle Managers"

    assignment_id = fields.Many2one("hr.appraisal.workflow.assignment", string="Review Cycle", required=True)
    employee_id = fields.Many2one(related="assignment_id.employee_id")
    line_ids = fields.One2many("hr.appraisal.manager.override.line", "wizard_id", string="Managers")

    @api.model
    def default_get(self, fields_list):
        res = super().default_get(fields_list)
        assignment = self.env["hr.appraisal.workflow.assignment"].browse(res.get("assignment_id")).exists()
        if assignment and "line_ids" in fields_list:
            res["line_ids"] = [
                (0, 0, {
                    "level": manager.level,
                    "manager_employee_id": manager.manager_employee_id.id,
                    "is_external": manager.is_external,
                    "external_name": manager.external_name,
                    "external_email": manager.external_email,
                    "is_evaluation_responsible": manager.is_evaluation_responsible,
                })
                for manager in assignment.get_effective_managers().sorted("level")
            ]
        return res

    def _reopen(self):
        self.ensure_one()
        return {
            "type": "ir.actions.act_window",
            "name": "Edit Managers",
            "res_model": self._name,
            "res_id": self.id,
            "view_mode": "form",
            "target": "new",
        }

    def _renumber_levels(self):
        for wizard in self:
            for level, line in enumerate(wizard.line_ids.sorted(lambda l: (l.level, l.id)), start=1):
                line.level = level

    def action_add_level(self):
        self.ensure_one()
        next_level = max(self.line_ids.mapped("level") or [0]) + 1
        self.env["hr.appraisal.manager.override.line"].create({"wizard_id": self.id, "level": next_level})
        return self._reopen()

    def _check_duplicate_managers(self):
        self.ensure_one()
        seen = set()
        for line in self.line_ids:
            if not line.manager_employee_id or line.is_external:
                continue
            if line.manager_employee_id.id in seen:
                raise UserError(
                    f"{line.manager_employee_id.name} can only be selected at one manager level."
                )
            seen.add(line.manager_employee_id.id)

    def action_save(self):
        self.ensure_one()
        self._check_duplicate_managers()
        assignment = self.assignment_id
        kept = self.line_ids.filtered(
            lambda l: (l.is_external and l.external_name) or (not l.is_external and l.manager_employee_id)
        ).sorted(lambda l: (l.level, l.id))
        assignment.manager_override_ids.unlink()
        assignment.write({
            "manager_override_ids": [
                (0, 0, {
                    "level": level,
                    "manager_employee_id": False if line.is_external else line.manager_employee_id.id,
                    "is_external": line.is_external,
                    "external_name": line.external_name if line.is_external else False,
                    "external_email": line.external_email if line.is_external else False,
                    "is_evaluation_responsible": line.is_evaluation_responsible,
                })
                for level, line in enumerate(kept, start=1)
            ]
        })
        assignment.message_post(body=f"Managers updated by {self.env.user.name}.")
        return toast_action("Managers updated successfully!")


class HrAppraisalManagerOverrideLine(models.TransientModel):
    _name = "hr.appraisal.manager.override.line"
    _description = "Review Cycle Manager Line"
    _order = "level, id"

    wizard_id = fields.Many2one("hr.appraisal.manager.override.wizard", required=True, ondelete="cascade")
    level = fields.Integer("Level", default=1)
    manager_employee_id = fields.Many2one("hr.employee", string="Manager")
    is_external = fields.Boolean("External")
    external_name = fields.Char("External Name")
    external_email = fields.Char("External Email")
    is_evaluation_responsible = fields.Boolean("Evaluation Responsible")

    def action_remove(self):
        self.ensure_one()
        wizard = self.wizard_id
        self.unlink()
        wizard._renumber_levels()
        return wizard._reopen()
