import logging
from typing import Optional

from github import Github
from github.GithubException import GithubException

from tasklink.core.config import settings
from tasklink.core.exceptions import IntegrationFailure
from tasklink.models.service import Service
from tasklink.models.task import Task


class GitHubIssueService:
    """Opens GitHub issues mirroring newly created tasks"""

    def __init__(self, github_token: Optional[str] = None):
        self.github = Github(github_token or settings.GITHUB_TOKEN or None)
        self.logger = logging.getLogger(__name__)

    def issue_title(self, task: Task) -> str:
        return f"[{task.task_id}] {task.title}"

    def create_issue(self, task: Task, service: Service) -> Task:
        """
        Create an issue in the service's repository and store its number/url on the task.

        Raises IntegrationFailure when the service has no repository or the
        GitHub API call fails.
        """
        if not service.github_repository:
            raise IntegrationFailure(
                f"Service {service.id} has no GitHub repository configured"
            )

        try:
            repo = self.github.get_repo(service.github_repository)
            issue = repo.create_issue(
                title=self.issue_title(task),
                body=task.description or "",
                labels=list(task.labels or []),
            )
        except GithubException as e:
            self.logger.error(f"GitHub API error: {e}")
            raise IntegrationFailure(str(e)) from e

        task.github_issue_number = issue.number
        task.github_issue_url = issue.html_url
        self.logger.info(
            f"Created GitHub issue #{issue.number} for task {task.task_id}"
        )
        return task
