"""Tests for the artifact emitter, the repository strategies and the file writer."""
import json
import tempfile
from pathlib import Path
import pytest
from scaffolder.core.errors import FileWriteError
from scaffolder.core.workflow import JakartaVersion
from scaffolder.generators.domain_gen.generator import ArtifactEmitter, generate_domain
from scaffolder.generators.domain_gen.naming import Layer
from scaffolder.generators.domain_gen.render import TemplateRenderer
from scaffolder.generators.domain_gen.repository import RepositoryBuilder
from scaffolder.generators.domain_gen.schema import parse_entity
from scaffolder.generators.domain_gen.types import GeneratedFile, GenerationOptions, WriteStatus
from scaffolder.generators.domain_gen.writer import write_files
from scaffolder.schemas.entities import ProjectCoordinates

COORDINATES = ProjectCoordinates(group_id="com.acme", artifact_id="shop")

PRODUCT = {
    "name": "Product",
    "fields": [{"name": "id", "type": "Long", "isId": True}, {"name": "title", "type": "String"}],
    "repository": "crud",
}


def _emit(raw, version=JakartaVersion.JAKARTA_11, options=None):
    emitter = ArtifactEmitter(TemplateRenderer(), RepositoryBuilder(version))
    files = emitter.generate_entity_artifacts(parse_entity(raw), COORDINATES, options)
    return {f.path: f for f in files}, files


def test_product_example_jakarta_11():
    """Product in com.acme/shop yields entity, Jakarta Data repository, DTO, mapper and service."""
    by_path, files = _emit(PRODUCT)

    assert [f.path for f in files] == [
        "com/acme/shop/entity/Product.java",
        "com/acme/shop/repository/ProductRepository.java",
        "com/acme/shop/model/ProductDto.java",
        "com/acme/shop/mapper/ProductMapper.java",
        "com/acme/shop/service/ProductService.java",
    ]
    assert [f.layer for f in files] == [Layer.ENTITY, Layer.REPOSITORY, Layer.MODEL, Layer.MAPPER, Layer.SERVICE]

    entity = by_path["com/acme/shop/entity/Product.java"].content
    assert entity.startswith("package com.acme.shop.entity;\n")
    assert "import jakarta.persistence.Entity;" in entity
    assert "@Entity\npublic class Product {" in entity
    assert "    @Id\n    private Long id;" in entity
    assert "private String title;" in entity
    assert "public String getTitle() {" in entity
    assert entity.rstrip().endswith("}")

    repository = by_path["com/acme/shop/repository/ProductRepository.java"].content
    assert "package com.acme.shop.repository;" in repository
    assert "import com.acme.shop.entity.Product;" in repository
    assert "import jakarta.data.repository.CrudRepository;" in repository
    assert "@Repository\npublic interface ProductRepository extends CrudRepository<Product, Long> {" in repository


def test_repository_kinds_map_to_jakarta_data_interfaces():
    basic, _ = _emit({**PRODUCT, "repository": "basic"})
    assert "extends BasicRepository<Product, Long>" in basic["com/acme/shop/repository/ProductRepository.java"].content

    custom, _ = _emit({**PRODUCT, "repository": "custom"})
    assert "extends DataRepository<Product, Long>" in custom["com/acme/shop/repository/ProductRepository.java"].content
    service = custom["com/acme/shop/service/ProductService.java"].content
    assert "findAll" not in service


def test_jakarta_10_adds_entity_manager_implementation():
    by_path, files = _emit(PRODUCT, version=JakartaVersion.JAKARTA_10)
    assert [f.path for f in files][:3] == [
        "com/acme/shop/entity/Product.java",
        "com/acme/shop/repository/ProductRepository.java",
        "com/acme/shop/repository/ProductRepositoryImpl.java",
    ]
    interface = by_path["com/acme/shop/repository/ProductRepository.java"].content
    assert "public interface ProductRepository {" in interface
    assert "Optional<Product> findById(Long id);" in interface
    assert "Stream<Product> findAll();" in interface
    assert "@Repository" not in interface

    impl = by_path["com/acme/shop/repository/ProductRepositoryImpl.java"].content
    assert "@ApplicationScoped" in impl
    assert "public class ProductRepositoryImpl implements ProductRepository {" in impl
    assert "private EntityManager em;" in impl
    assert "if (entity.getId() == null) {" in impl
    assert '"SELECT e FROM Product e", Product.class' in impl


def test_primitive_identifier_is_boxed_in_generics():
    raw = {"name": "Counter", "fields": [{"name": "id", "type": "long", "isId": True}]}
    by_path, _ = _emit(raw)
    repository = by_path["com/acme/shop/repository/CounterRepository.java"].content
    assert "CrudRepository<Counter, Long>" in repository
    entity = by_path["com/acme/shop/entity/Counter.java"].content
    assert "private long id;" in entity


def test_primitive_identifier_compared_with_zero_on_save():
    raw = {"name": "Counter", "fields": [{"name": "id", "type": "long", "isId": True}]}
    by_path, _ = _emit(raw, version=JakartaVersion.JAKARTA_10)
    impl = by_path["com/acme/shop/repository/CounterRepositoryImpl.java"].content
    assert "if (entity.getId() == 0) {" in impl
    assert "== null" not in impl
    assert "public Optional<Counter> findById(Long id) {" in impl


def test_synthesized_identifier_and_generated_value():
    raw = {"name": "Note", "fields": [{"name": "text", "type": "String"}]}
    by_path, _ = _emit(raw)
    entity = by_path["com/acme/shop/entity/Note.java"].content
    assert entity.index("private Long id;") < entity.index("private String text;")

    raw = {"name": "Ticket", "fields": [{"name": "id", "type": "Long", "isId": True, "generatedValue": "identity"}]}
    by_path, _ = _emit(raw)
    entity = by_path["com/acme/shop/entity/Ticket.java"].content
    assert "import jakarta.persistence.GeneratedValue;" in entity
    assert "    @Id\n    @GeneratedValue(strategy = GenerationType.IDENTITY)\n    private Long id;" in entity


def test_field_annotations_table_and_imports():
    raw = {
        "name": "Book",
        "tableName": "books",
        "fields": [
            {"name": "isbn", "type": "String", "isId": True},
            {"name": "title", "type": "String", "annotations": {
                "Column": {"name": "book_title", "nullable": False, "length": 200},
                "jakarta.validation.constraints.NotBlank": None,
            }},
            {"name": "published", "type": "LocalDate"},
        ],
    }
    by_path, _ = _emit(raw)
    entity = by_path["com/acme/shop/entity/Book.java"].content
    assert '@Table(name = "books")' in entity
    assert '    @Column(name = "book_title", nullable = false, length = 200)\n    @NotBlank\n    private String title;' in entity
    for expected in (
        "import jakarta.persistence.Column;",
        "import jakarta.persistence.Table;",
        "import jakarta.validation.constraints.NotBlank;",
        "import java.time.LocalDate;",
    ):
        assert expected in entity
    imports = [line for line in entity.splitlines() if line.startswith("import ")]
    assert imports == sorted(imports)

    dto = by_path["com/acme/shop/model/BookDto.java"].content
    assert "import java.time.LocalDate;" in dto
    assert "@Column" not in dto
    assert "CrudRepository<Book, String>" in by_path["com/acme/shop/repository/BookRepository.java"].content


def test_relations_render_and_are_ignored_by_mapper():
    raw = {
        "name": "Invoice",
        "fields": [{"name": "number", "type": "String"}],
        "relations": [
            {"name": "customer", "target": "Customer"},
            {"name": "lines", "target": "InvoiceLine", "kind": "one-to-many", "mappedBy": "invoice"},
        ],
    }
    by_path, _ = _emit(raw)
    entity = by_path["com/acme/shop/entity/Invoice.java"].content
    assert "    @ManyToOne\n    private Customer customer;" in entity
    assert '    @OneToMany(mappedBy = "invoice")\n    private List<InvoiceLine> lines;' in entity
    assert "import java.util.List;" in entity
    assert "public List<InvoiceLine> getLines() {" in entity

    mapper = by_path["com/acme/shop/mapper/InvoiceMapper.java"].content
    assert "@Mapper(componentModel = MappingConstants.ComponentModel.CDI)" in mapper
    assert "InvoiceDto toModel(Invoice entity);" in mapper
    assert '@Mapping(target = "customer", ignore = true)' in mapper
    assert '@Mapping(target = "lines", ignore = true)' in mapper

    dto = by_path["com/acme/shop/model/InvoiceDto.java"].content
    assert "customer" not in dto


def test_service_wires_repository_and_mapper():
    by_path, files = _emit(PRODUCT)
    service_file = by_path["com/acme/shop/service/ProductService.java"]
    assert service_file.preserve_existing
    service = service_file.content
    assert "import com.acme.shop.repository.ProductRepository;" in service
    assert "import com.acme.shop.mapper.ProductMapper;" in service
    assert "private ProductRepository repository;" in service
    assert "public List<ProductDto> findAll() {" in service
    assert "public void delete(Long id) {" in service
    assert not any(f.preserve_existing for f in files if f.layer is not Layer.SERVICE)


def test_managed_bean_and_crud_view_options():
    options = GenerationOptions(managed_beans=True, faces_template="/WEB-INF/template.xhtml", faces_define="body")
    by_path, files = _emit(PRODUCT, options=options)
    assert [f.path for f in files][-2:] == ["com/acme/shop/faces/ProductBean.java", "product.xhtml"]

    bean = by_path["com/acme/shop/faces/ProductBean.java"]
    assert bean.preserve_existing
    assert "@Named\n@ViewScoped\npublic class ProductBean implements Serializable {" in bean.content
    assert "service.delete(item.getId());" in bean.content

    view = by_path["product.xhtml"].content
    assert 'template="/WEB-INF/template.xhtml"' in view
    assert '<ui:define name="body">' in view
    assert 'value="#{productBean.items}"' in view
    assert 'value="#{item.title}"' in view
    assert 'value="#{productBean.selected.title}"' in view
    assert 'id="id"' not in view


def test_write_files_reports_status():
    with tempfile.TemporaryDirectory() as temp_dir:
        out_dir = Path(temp_dir) / "src/main/java"
        files = [
            GeneratedFile(path="com/acme/A.java", content="class A {}\n", layer=Layer.ENTITY),
            GeneratedFile(path="com/acme/S.java", content="class S {}\n", layer=Layer.SERVICE, preserve_existing=True),
        ]
        first = write_files(files, out_dir)
        assert [r.status for r in first] == [WriteStatus.WRITTEN, WriteStatus.WRITTEN]
        assert (out_dir / "com/acme/A.java").read_text(encoding="utf-8") == "class A {}\n"

        second = write_files(files, out_dir)
        assert [r.status for r in second] == [WriteStatus.UNCHANGED, WriteStatus.UNCHANGED]

        # hand edits survive on preserved files only
        (out_dir / "com/acme/A.java").write_text("edited", encoding="utf-8")
        (out_dir / "com/acme/S.java").write_text("edited", encoding="utf-8")
        third = write_files(files, out_dir)
        assert [r.status for r in third] == [WriteStatus.WRITTEN, WriteStatus.PRESERVED]
        assert (out_dir / "com/acme/A.java").read_text(encoding="utf-8") == "class A {}\n"
        assert (out_dir / "com/acme/S.java").read_text(encoding="utf-8") == "edited"


def test_views_go_to_webapp_root(tmp_path):
    files = [GeneratedFile(path="product.xhtml", content="<x/>", layer=Layer.FACES)]
    write_files(files, tmp_path / "java", tmp_path / "webapp")
    assert (tmp_path / "webapp" / "product.xhtml").exists()
    assert not (tmp_path / "java" / "product.xhtml").exists()


def test_write_failure_wrapped(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    files = [GeneratedFile(path="com/acme/A.java", content="x", layer=Layer.ENTITY)]
    with pytest.raises(FileWriteError) as exc_info:
        write_files(files, blocker)
    assert exc_info.value.path == blocker / "com/acme/A.java"


def test_write_failure_carries_files_written_before_it(tmp_path):
    out_dir = tmp_path / "java"
    (out_dir / "com/acme/B.java").mkdir(parents=True)
    files = [
        GeneratedFile(path="com/acme/A.java", content="class A {}\n", layer=Layer.ENTITY),
        GeneratedFile(path="com/acme/B.java", content="class B {}\n", layer=Layer.SERVICE),
        GeneratedFile(path="com/acme/C.java", content="class C {}\n", layer=Layer.MAPPER),
    ]
    with pytest.raises(FileWriteError) as exc_info:
        write_files(files, out_dir)
    assert [(r.path, r.status) for r in exc_info.value.results] == [
        (str(out_dir / "com/acme/A.java"), WriteStatus.WRITTEN),
    ]
    assert not (out_dir / "com/acme/C.java").exists()


def test_generate_domain_writes_everything(tmp_path):
    entities_path = tmp_path / "entities.json"
    entities_path.write_text(json.dumps({"entities": [PRODUCT]}), encoding="utf-8")
    results = generate_domain(entities_path, COORDINATES, tmp_path / "out")
    assert len(results) == 5
    assert all(r.status is WriteStatus.WRITTEN for r in results)
    assert (tmp_path / "out/com/acme/shop/entity/Product.java").exists()


def test_generate_domain_puts_views_under_webapp(tmp_path):
    entities_path = tmp_path / "entities.json"
    entities_path.write_text(json.dumps(PRODUCT), encoding="utf-8")
    options = GenerationOptions(faces_template="/WEB-INF/template.xhtml")
    java_root = tmp_path / "src/main/java"

    generate_domain(entities_path, COORDINATES, java_root, options)
    assert (tmp_path / "src/main/webapp/product.xhtml").exists()
    assert not (java_root / "product.xhtml").exists()

    generate_domain(entities_path, COORDINATES, java_root, options, webapp_dir=tmp_path / "views")
    assert (tmp_path / "views/product.xhtml").exists()
