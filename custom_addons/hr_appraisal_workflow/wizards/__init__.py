# -*- coding: utf-8 -*-
from . import hr_appraisal_assign_wizard
from . import hr_appraisal_manager_override_wizard
from . import hr_appraisal_approval_review_wizard
from . import hr_appraisal_form_fill_wizard
from . import hr_appraisal_meeting_join_wizard
from . import hr_appraisal_task
