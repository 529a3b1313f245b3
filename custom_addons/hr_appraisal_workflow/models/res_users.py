from odoo import models


class ResUsers(models.Model):
    _inherit = "res.users"

    def get_appraisal_role(self):
        """Role of the user in the appraisal application: admin, manager or employee"""
        self.ensure_one()
        if self.has_group("hr_appraisal_workflow.group_appraisal_admin"):
            return "admin"
        if self.has_group("hr_appraisal_workflow.group_appraisal_manager"):
            return "manager"
        return "employee"
