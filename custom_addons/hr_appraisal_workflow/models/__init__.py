# -*- coding: utf-8 -*-
from . import hr_appraisal_workflow_config
from . import hr_appraisal_evaluation_form
from . import hr_appraisal_workflow_template
from . import hr_appraisal_workflow_stage
from . import hr_appraisal_meeting_frequency
from . import hr_appraisal_manager_level
from . import hr_employee
from . import res_users
from . import hr_appraisal_workflow_assignment
from . import hr_appraisal_stage_completion
from . import hr_appraisal_workflow_meeting
from . import hr_appraisal_notification
