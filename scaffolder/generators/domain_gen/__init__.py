from scaffolder.generators.domain_gen.generator import ArtifactEmitter, generate_domain
from scaffolder.generators.domain_gen.repository import RepositoryBuilder
from scaffolder.generators.domain_gen.render import TemplateRenderer

__all__ = ["ArtifactEmitter", "RepositoryBuilder", "TemplateRenderer", "generate_domain"]
